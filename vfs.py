'''In-memory directory tree of an archive, holding bounds instead of data'''

import sys

INDENT = 2


class File:

    def __init__(self, name, data_bounds):
        self.name = name
        self.data_bounds = data_bounds  # (start, size) inside the data region

    def absolute_bounds(self, header):
        '''(start, size) counted from the start of the archive'''
        start, size = self.data_bounds
        return (header.dataOffset + start, size)

    def is_dir(self):
        return False

    def __repr__(self):
        return 'File(%r, %r)' % (self.name, self.data_bounds)


class Dir:

    def __init__(self, name):
        self.name = name
        self.members = []

    def add(self, node):
        self.members.append(node)

    def is_dir(self):
        return True

    def find(self, path):
        '''Look up a '/'-separated path below this directory'''
        node = self
        for part in path.strip('/').split('/'):
            if not part:
                continue
            if not node.is_dir():
                return None
            for member in node.members:
                if member.name == part:
                    node = member
                    break
            else:
                return None

        return node

    def __repr__(self):
        return 'Dir(%r, %u members)' % (self.name, len(self.members))


class Fs:

    def __init__(self, root):
        self.root = root


def walk(dir, depth=0):
    '''Yield (depth, node) for dir and everything below it, in order'''
    pending = [(depth, dir)]

    while pending:
        depth, node = pending.pop()
        yield depth, node

        if node.is_dir():
            pending.extend((depth + 1, member)
                           for member in reversed(node.members))


def dump_tree(dir, out=None, sizes=False):
    if out is None:
        out = sys.stdout

    for depth, node in walk(dir):
        if node.is_dir():
            out.write('%s%s/\n' % (' ' * (depth * INDENT), node.name))
        elif sizes:
            out.write('%s%s - 0x%08x %u\n' % (' ' * (depth * INDENT),
                                               node.name,
                                               node.data_bounds[0],
                                               node.data_bounds[1]))
        else:
            out.write('%s%s\n' % (' ' * (depth * INDENT), node.name))
