'''Build small RARC archives in memory for the tests'''

import io
import struct

from rarc_headers import (NAME_ENCODING, RARCFileEntry, RARCFolderEntry,
                          RARCHeader, RARCNode, hash_string)

NO_PARENT = 0xFFFFFFFF


def pad32(data):
    return data + b'\x00' * (-len(data) % 0x20)


class StringTableBuilder:

    def __init__(self):
        self.data = b''
        self.offsets = {}
        self.add('.')
        self.add('..')

    def add(self, name):
        if name not in self.offsets:
            self.offsets[name] = len(self.data)
            self.data += name.encode(NAME_ENCODING) + b'\x00'
        return self.offsets[name]


def pack_member(member, strings, index):
    kind = member[0]

    if kind == 'file':
        return RARCFileEntry(id=index,
                             filenameOffset=strings.add(member[1]),
                             filenameHash=hash_string(member[1]),
                             dataOffset=member[2],
                             dataSize=member[3]).pack()
    if kind == 'dir':
        return RARCFolderEntry(filenameOffset=strings.add(member[1]),
                               filenameHash=hash_string(member[1]),
                               nodeIndex=member[2]).pack()

    # raw entry bytes
    return member[1]


def build_rarc(nodes, data=b'', links=True, **header_fields):
    '''Pack nodes into an archive

    nodes is a list of (node_id, name, members); members are
    ('file', name, offset, size), ('dir', name, node_index) or
    ('raw', entry_bytes). Every node gets its '.' and '..' entries
    appended unless links is False. Extra keyword arguments override
    header fields after layout.
    '''
    strings = StringTableBuilder()

    parents = {0: NO_PARENT}
    for index, (_id, _name, members) in enumerate(nodes):
        for member in members:
            if member[0] == 'dir':
                parents.setdefault(member[2], index)

    packed_nodes = b''
    entries = []
    for index, (node_id, name, members) in enumerate(nodes):
        num_entries = len(members) + (2 if links else 0)
        packed_nodes += RARCNode(id=node_id,
                                 filenameOffset=strings.add(name),
                                 filenameHash=hash_string(name),
                                 numEntries=num_entries,
                                 firstEntryIndex=len(entries)).pack()

        for member in members:
            entries.append(pack_member(member, strings, len(entries)))

        if links:
            entries.append(RARCFolderEntry(filenameOffset=0,
                                           filenameHash=hash_string('.'),
                                           nodeIndex=index).pack())
            entries.append(RARCFolderEntry(
                filenameOffset=2,
                filenameHash=hash_string('..'),
                nodeIndex=parents.get(index, NO_PARENT)).pack())

    packed_entries = b''.join(entries)
    string_data = pad32(strings.data)

    nodes_offset = 0x40
    entries_offset = nodes_offset + len(pad32(packed_nodes))
    strings_offset = entries_offset + len(pad32(packed_entries))
    data_offset = strings_offset + len(string_data)

    fields = dict(fileSize=data_offset + len(data),
                  dataOffset=data_offset,
                  dataLength=len(data),
                  numNodes=len(nodes),
                  nodesOffset=nodes_offset,
                  numEntries=len(entries),
                  entriesOffset=entries_offset,
                  stringTableLength=len(string_data),
                  stringTableOffset=strings_offset,
                  numFiles=len(entries))
    fields.update(header_fields)

    return (RARCHeader(**fields).pack() +
            pad32(packed_nodes) +
            pad32(packed_entries) +
            string_data +
            data)


def nested_chain(depth):
    '''A ROOT with depth folders, each the only member of the one above'''
    nodes = []
    for i in range(depth):
        node_id = 'ROOT' if i == 0 else 'DATA'
        nodes.append((node_id, 'd%u' % (i), [('dir', 'd%u' % (i + 1), i + 1)]))
    nodes.append(('DATA', 'd%u' % (depth), [('file', 'leaf.bin', 0, 4)]))

    return nodes


def raw_entry(type_tag, name_offset=0x10, value=0, size=0, idx=0):
    return struct.pack('>HHHHIII',
                       idx, 0, type_tag, name_offset, value, size, 0)


class OneByteReader(io.RawIOBase):
    '''A seekable source that never hands out more than one byte per read'''

    def __init__(self, data):
        self._buf = io.BytesIO(data)
        self.reads = 0

    def readable(self):
        return True

    def seekable(self):
        return True

    def seek(self, offset, whence=io.SEEK_SET):
        return self._buf.seek(offset, whence)

    def tell(self):
        return self._buf.tell()

    def read(self, size=-1):
        self.reads += 1
        return self._buf.read(1 if size != 0 else 0)
