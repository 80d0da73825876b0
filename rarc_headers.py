import struct

from header import BaseHeader
from parse_read import Incomplete
from rarc_errors import NameEncodingError, ParseError

RARC_MAGIC = b'RARC'

# offsets in the info block are relative to the end of the 0x20 byte header
HEADER_BLOCK = 0x20

# names are stored as shift_jis, Windows flavour
NAME_ENCODING = 'cp932'

# string table offsets of the '.' and '..' links every node carries
SELF_NAME_OFFSET = 0
PARENT_NAME_OFFSET = 2

ENTRY_TYPE_FOLDER = 0x0200
ENTRY_TYPE_FILE = 0x1100


def hash_string(string):
    '''Hash of string inserted into string table'''

    string = string.rstrip('\x00')

    result = 0
    for c in string:
        result *= 3
        result += ord(c)
        result %= 0x10000

    return result


class RARCHeader(BaseHeader):
    '''RARC header plus the info block that follows it'''

    _structformat = '>4sIIIIIIIIIIIIIHHI'
    _fields = ('fileSize', 'dataOffset', 'dataLength', 'dataLength2',
               'numNodes', 'nodesOffset', 'numEntries', 'entriesOffset',
               'stringTableLength', 'stringTableOffset', 'numFiles')

    def __init__(self, **fields):
        self.fileSize = 0

        # all offsets are absolute once unpacked
        self.dataOffset = HEADER_BLOCK
        self.dataLength = 0
        self.dataLength2 = None

        self.numNodes = 0
        self.nodesOffset = HEADER_BLOCK
        self.numEntries = 0
        self.entriesOffset = HEADER_BLOCK

        self.stringTableLength = 0
        self.stringTableOffset = HEADER_BLOCK

        # number of file entries that are files, not directories
        self.numFiles = 0

        BaseHeader.__init__(self, **fields)

        # a copy of dataLength kept on disk; written back as found
        if self.dataLength2 is None:
            self.dataLength2 = self.dataLength

    def unpack(self, buf):
        (magic,
         self.fileSize,
         header_size,
         data_offset,
         self.dataLength,
         self.dataLength2,
         _unknown1,
         _unknown2,
         self.numNodes,
         nodes_offset,
         self.numEntries,
         entries_offset,
         self.stringTableLength,
         strings_offset,
         self.numFiles,
         _unknown3,
         _unknown4) = self._s.unpack_from(buf)

        if magic != RARC_MAGIC:
            raise ParseError('bad magic %r' % (magic))
        if header_size != HEADER_BLOCK:
            raise ParseError('header length is 0x%x, expected 0x%x' % (
                header_size, HEADER_BLOCK))

        self.dataOffset = data_offset + HEADER_BLOCK
        self.nodesOffset = nodes_offset + HEADER_BLOCK
        self.entriesOffset = entries_offset + HEADER_BLOCK
        self.stringTableOffset = strings_offset + HEADER_BLOCK

    def pack(self):
        return self._s.pack(
            RARC_MAGIC,
            self.fileSize,
            HEADER_BLOCK,
            self.dataOffset - HEADER_BLOCK,
            self.dataLength,
            self.dataLength2,
            0,
            0,
            self.numNodes,
            self.nodesOffset - HEADER_BLOCK,
            self.numEntries,
            self.entriesOffset - HEADER_BLOCK,
            self.stringTableLength,
            self.stringTableOffset - HEADER_BLOCK,
            self.numFiles,
            0,
            0)

    def __str__(self):
        result = ''
        result += '*** RARC header ***\n'
        result += 'total size:\t0x%08x (%u)\n' % (
            self.fileSize,
            self.fileSize)
        result += 'data start:\t0x%08x\n' % (self.dataOffset)
        result += 'files size:\t0x%08x\n' % (self.dataLength)
        result += 'files size2:\t0x%08x\n' % (self.dataLength2)
        result += '# nodes:\t0x%08x (%u)\n' % (self.numNodes, self.numNodes)
        result += 'node start:\t0x%08x\n' % (self.nodesOffset)
        result += '# entries:\t0x%08x (%u)\n' % (
            self.numEntries, self.numEntries)
        result += 'entry start:\t0x%08x\n' % (self.entriesOffset)
        result += 'strings length:\t0x%08x\n' % (self.stringTableLength)
        result += 'string start:\t0x%08x\n' % (self.stringTableOffset)
        result += 'num files:\t0x%04x (%u)' % (self.numFiles, self.numFiles)
        return result


class RARCNode(BaseHeader):
    _structformat = '>4sIHHI'
    _fields = ('id', 'name', 'filenameOffset', 'filenameHash',
               'numEntries', 'firstEntryIndex')

    def __init__(self, **fields):
        self.id = ''  # four letter shortname, 'ROOT' for the first node
        self.filenameOffset = 0  # directory name, offset into string table
        self.filenameHash = 0
        self.numEntries = 0  # how many entries belong to this node?
        self.firstEntryIndex = 0

        self.name = None

        BaseHeader.__init__(self, **fields)

    def unpack(self, buf):
        (node_id,
         self.filenameOffset,
         self.filenameHash,
         self.numEntries,
         self.firstEntryIndex) = self._s.unpack_from(buf)

        try:
            self.id = node_id.decode('ascii')
        except UnicodeDecodeError:
            raise ParseError('node id %r is not ascii' % (node_id))

    def pack(self):
        node_id = self.id.encode('ascii')[:4]
        if len(node_id) != 4:
            raise ValueError('node type must be 4 characters')

        return self._s.pack(
            node_id,
            self.filenameOffset,
            self.filenameHash,
            self.numEntries,
            self.firstEntryIndex)

    def entry_range(self):
        '''Indices into the entry table of this node's entries'''
        return range(self.firstEntryIndex,
                     self.firstEntryIndex + self.numEntries)

    def read_name(self, string_table):
        self.name = string_table.read_string(self.filenameOffset)

    def __str__(self):
        result = ''
        result += '*** node ***\n'
        result += 'type:\t\t%s\n' % (self.id)
        result += 'name:\t\t%s\n' % (self.name)
        result += 'name offset:\t0x%08x\n' % (self.filenameOffset)
        result += 'name hash:\t0x%04x\n' % (self.filenameHash)
        result += '# entries:\t0x%04x (%u)\n' % (
            self.numEntries, self.numEntries)
        result += 'entries index:\t0x%08x' % (self.firstEntryIndex)

        return result


class RARCEntry(BaseHeader):
    '''A member of a node: either a RARCFileEntry or a RARCFolderEntry'''

    _structformat = '>HHHHIII'
    entry_type = None

    def __init__(self, **fields):
        self.filenameHash = 0
        self.filenameOffset = 0  # file/subdir name, offset into string table

        self.name = None

        BaseHeader.__init__(self, **fields)

    def is_link(self):
        '''True for the '.' and '..' entries'''
        return self.filenameOffset in (SELF_NAME_OFFSET, PARENT_NAME_OFFSET)

    def read_name(self, string_table):
        self.name = string_table.read_string(self.filenameOffset)


class RARCFileEntry(RARCEntry):
    entry_type = ENTRY_TYPE_FILE
    _fields = ('id', 'name', 'filenameOffset', 'filenameHash',
               'dataOffset', 'dataSize')

    def __init__(self, **fields):
        self.id = 0
        self.dataOffset = 0  # offset to file data, relative to data start
        self.dataSize = 0

        RARCEntry.__init__(self, **fields)

    def unpack(self, buf):
        (self.id,
         self.filenameHash,
         _type,
         self.filenameOffset,
         self.dataOffset,
         self.dataSize,
         _unknown) = self._s.unpack_from(buf)

    def pack(self):
        return self._s.pack(
            self.id,
            self.filenameHash,
            self.entry_type,
            self.filenameOffset,
            self.dataOffset,
            self.dataSize,
            0)

    def __str__(self):
        result = '*** file ***\n'
        result += 'id:\t0x%04x\n' % (self.id)
        result += 'name:\t%s\n' % (self.name)
        result += 'name hash:\t0x%04x\n' % (self.filenameHash)
        result += 'name offset:\t0x%04x\n' % (self.filenameOffset)
        result += 'data offset:\t0x%08x\n' % (self.dataOffset)
        result += 'data size:\t0x%08x' % (self.dataSize)
        return result


class RARCFolderEntry(RARCEntry):
    entry_type = ENTRY_TYPE_FOLDER
    _fields = ('name', 'filenameOffset', 'filenameHash', 'nodeIndex')

    def __init__(self, **fields):
        self.nodeIndex = 0  # index of the directory's node

        RARCEntry.__init__(self, **fields)

    def unpack(self, buf):
        (_id,
         self.filenameHash,
         _type,
         self.filenameOffset,
         self.nodeIndex,
         _size,
         _unknown) = self._s.unpack_from(buf)

    def pack(self):
        return self._s.pack(
            0xFFFF,
            self.filenameHash,
            self.entry_type,
            self.filenameOffset,
            self.nodeIndex,
            0x10,
            0)

    def __str__(self):
        result = '*** folder ***\n'
        result += 'name:\t%s\n' % (self.name)
        result += 'name hash:\t0x%04x\n' % (self.filenameHash)
        result += 'name offset:\t0x%04x\n' % (self.filenameOffset)
        result += 'node index:\t0x%08x' % (self.nodeIndex)
        return result


ENTRY_TYPES = {
    ENTRY_TYPE_FOLDER: RARCFolderEntry,
    ENTRY_TYPE_FILE: RARCFileEntry,
}

ENTRY_SIZE = struct.calcsize(RARCEntry._structformat)


def parse_header(buf):
    # check the magic as soon as it is there, before waiting on the rest
    if len(buf) < len(RARC_MAGIC):
        raise Incomplete(len(RARC_MAGIC))
    if buf[:len(RARC_MAGIC)] != RARC_MAGIC:
        raise ParseError('bad magic %r' % (bytes(buf[:len(RARC_MAGIC)])))

    header = RARCHeader()
    rest = header.take(buf)

    return header, rest


def parse_node(buf):
    node = RARCNode()
    rest = node.take(buf)

    return node, rest


def parse_entry(buf):
    if len(buf) < ENTRY_SIZE:
        raise Incomplete(ENTRY_SIZE)

    entry_type, = struct.unpack_from('>H', buf, 4)
    try:
        entry = ENTRY_TYPES[entry_type]()
    except KeyError:
        raise ParseError('unsupported entry type 0x%04x' % (entry_type))

    rest = entry.take(buf)

    return entry, rest


class StringTable:
    '''The archive's blob of null-terminated names'''

    def __init__(self, data=b''):
        self.data = bytes(data)

    def __len__(self):
        return len(self.data)

    def read_string(self, offset):
        end = self.data.find(b'\0', offset)
        if end == -1:
            end = len(self.data)

        try:
            return self.data[offset:end].decode(NAME_ENCODING)
        except UnicodeDecodeError as e:
            raise NameEncodingError(str(e)) from e
