'''Read a RARC archive into node and entry tables and a directory tree.

Only metadata is read. Files in the tree carry the bounds of their data
inside the archive's data region; nothing is extracted.

    with open('bianco0.rarc', 'rb') as in_file:
        rarc_file = open_rarc(in_file)
        vfs.dump_tree(rarc_file.fs.root)
'''

import logging

import parse_read
from rarc_errors import (NoNodesError, NoRootNodeError, ParseError,
                         RARCIOError)
from rarc_headers import (RARCFileEntry, RARCHeader, StringTable,
                          hash_string, parse_entry, parse_header, parse_node)
from vfs import Dir, File, Fs

logger = logging.getLogger(__name__)

ROOT_NODE_ID = 'ROOT'


def build_tree(nodes, entries):
    '''Turn the flat node and entry tables into a tree rooted at nodes[0]

    Folders are expanded from a work list rather than by recursion, so the
    depth of the archive's nesting is not limited by the interpreter.
    '''
    root = Dir(nodes[0].name)

    pending = [(0, root, (0,))]
    while pending:
        node_index, dir, path = pending.pop()
        pending.extend(process_node(nodes, entries, node_index, dir, path))

    return root


def process_node(nodes, entries, node_index, dir, path):
    '''Add the members of nodes[node_index] to dir

    Subdirectories are added empty, in table order, and returned as
    (node_index, dir, path) work items still to be filled in. path holds
    the node indices from the root down to this node; a folder pointing
    back at one of them would never finish.
    '''
    node = nodes[node_index]

    if node.firstEntryIndex + node.numEntries > len(entries):
        raise ParseError('node "%s" entries %u..%u exceed entry table (%u)' % (
            node.name, node.firstEntryIndex,
            node.firstEntryIndex + node.numEntries, len(entries)))

    subdirs = []
    for i in node.entry_range():
        entry = entries[i]

        if entry.is_link():
            continue

        if isinstance(entry, RARCFileEntry):
            dir.add(File(entry.name, (entry.dataOffset, entry.dataSize)))
            continue

        if entry.nodeIndex >= len(nodes):
            raise ParseError('folder "%s" points at node %u of %u' % (
                entry.name, entry.nodeIndex, len(nodes)))
        if entry.nodeIndex in path:
            raise ParseError('folder "%s" loops back to node %u' % (
                entry.name, entry.nodeIndex))

        subdir = Dir(entry.name)
        dir.add(subdir)
        subdirs.append((entry.nodeIndex, subdir, path + (entry.nodeIndex,)))

    # popped last-in first-out; reversed keeps folders filled in table order
    return reversed(subdirs)


class RARCFile:

    def __init__(self):
        self.header = RARCHeader()
        self.nodes = []
        self.entries = []
        self.string_table = StringTable()
        self.fs = None

        self.in_file = None

    def seek(self, offset):
        try:
            self.in_file.seek(offset)
        except OSError as e:
            raise RARCIOError(str(e)) from e

    def read_string_table(self):
        self.seek(self.header.stringTableOffset)

        size = self.header.stringTableLength
        data = b''
        while len(data) < size:
            try:
                chunk = self.in_file.read(size - len(data))
            except OSError as e:
                raise RARCIOError(str(e)) from e

            if not chunk:
                raise RARCIOError(
                    'string table truncated: got %u of %u bytes' % (
                        len(data), size))
            data += chunk

        return StringTable(data)

    def check_hash(self, record):
        if hash_string(record.name) != record.filenameHash:
            logger.warning('Incorrect hash for "%s": %u != %u',
                           record.name,
                           hash_string(record.name),
                           record.filenameHash)

    def read_node(self):
        node = parse_read.read(parse_node, self.in_file)
        node.read_name(self.string_table)
        self.check_hash(node)

        logger.debug('%s', node)

        return node

    def read_entry(self):
        entry = parse_read.read(parse_entry, self.in_file)
        entry.read_name(self.string_table)
        self.check_hash(entry)

        logger.debug('%s', entry)

        return entry

    def unpack(self, in_file):
        self.in_file = in_file

        self.header = parse_read.read(parse_header, in_file)
        logger.debug('%s', self.header)

        if self.header.numNodes == 0:
            raise NoNodesError()

        self.string_table = self.read_string_table()

        self.seek(self.header.nodesOffset)
        self.nodes = [self.read_node() for _ in range(self.header.numNodes)]

        if self.nodes[0].id != ROOT_NODE_ID:
            raise NoRootNodeError(self.nodes[0].id)

        self.seek(self.header.entriesOffset)
        self.entries = [self.read_entry()
                        for _ in range(self.header.numEntries)]

        logger.info('root node "%s"', self.nodes[0].name)
        self.fs = Fs(build_tree(self.nodes, self.entries))

        return self


def open_rarc(in_file):
    '''Read the archive in in_file, which the result keeps hold of'''
    return RARCFile().unpack(in_file)
