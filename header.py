import struct

from parse_read import Incomplete


class BaseHeader:

    _fields = ()

    def __init__(self, **fields):
        try:
            self._s = struct.Struct(self._structformat)
        except AttributeError:
            raise TypeError('Struct format not set')

        for field, value in fields.items():
            if field not in self._fields:
                raise TypeError('%s has no field %r' % (
                    type(self).__name__, field))
            setattr(self, field, value)

    def size(self):
        return self._s.size

    def take(self, buf):
        '''Unpack this record from the front of buf and return the rest'''
        if len(buf) < self.size():
            raise Incomplete(self.size())

        self.unpack(buf[:self.size()])

        return buf[self.size():]

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented

        return all(getattr(self, f) == getattr(other, f)
                   for f in self._fields)

    def __repr__(self):
        return '%s(%s)' % (
            type(self).__name__,
            ', '.join('%s=%r' % (f, getattr(self, f)) for f in self._fields))
