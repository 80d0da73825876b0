'''Drive a pure parser against a file-like object, growing the input on demand.

A parser is any callable taking a bytes buffer and returning a tuple of
``(parsed, remaining)``. When the buffer is too short it raises
``Incomplete``, giving the total buffer length it needs if it knows it.
Any other exception, ``ParseError`` in particular, ends the read.
'''

from rarc_errors import RARCIOError


class Incomplete(Exception):
    '''More input is needed; needed is the total length, or None if unknown'''

    def __init__(self, needed=None):
        Exception.__init__(self, needed)
        self.needed = needed


def read(parser, in_file):
    '''Parse one value from in_file, reading only as many bytes as it takes'''
    buf = b''

    while True:
        try:
            parsed, _ = parser(buf)
            return parsed
        except Incomplete as e:
            if e.needed is None:
                want = 1
            else:
                want = max(e.needed - len(buf), 1)

        try:
            chunk = in_file.read(want)
        except OSError as e:
            raise RARCIOError(str(e)) from e

        if not chunk:
            raise RARCIOError('unexpected end of file after %u bytes' % (
                len(buf)))

        buf += chunk
