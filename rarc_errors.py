class RARCError(Exception):
    '''Base class for everything that can go wrong reading a RARC'''


class RARCIOError(RARCError):
    '''The byte source failed or ran out before a record was complete'''


class ParseError(RARCError):
    '''Malformed or unexpected bytes in the archive metadata'''


class NoNodesError(RARCError):

    def __init__(self):
        RARCError.__init__(self, 'node table is empty')


class NoRootNodeError(RARCError):

    def __init__(self, found):
        RARCError.__init__(self,
                           'first node is %r, expected \'ROOT\'' % (found))
        self.found = found


class NameEncodingError(RARCError):
    '''A string table name is not valid shift_jis'''

    def __init__(self, message):
        RARCError.__init__(self, message)
        self.message = message
