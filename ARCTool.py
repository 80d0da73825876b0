#!/usr/bin/env python
import logging
import sys
from optparse import OptionParser

import vfs
from rarc import open_rarc
from rarc_errors import RARCError


def configure_logging(quiet, verbose):
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s',
        stream=sys.stderr,
    )


def list_rarc(in_path, options, out=None):
    if out is None:
        out = sys.stdout

    with open(in_path, 'rb') as in_file:
        rarc_file = open_rarc(in_file)

        if options.header:
            out.write('%s\n' % (rarc_file.header))

        if options.listMode or not options.header:
            vfs.dump_tree(rarc_file.fs.root, out, sizes=options.sizes)


def make_parser():
    parser = OptionParser(usage="python %prog [-l] [-s] [-H] [-q] [-v] <inputfile> [inputfile2] ... [inputfileN]", version="ARCTool 0.4")
    parser.add_option("-l", "--list", action="store_true", dest="listMode",
                      default=False,
                      help="print a list of files contained in the specified archive (the default unless -H is given)")
    parser.add_option("-s", "--sizes", action="store_true", dest="sizes",
                      default=False,
                      help="with the list, show where each file's data lives inside the data region")
    parser.add_option("-H", "--header", action="store_true", dest="header",
                      default=False,
                      help="print the archive header")
    parser.add_option("-q", "--quiet", action="store_true", dest="quiet",
                      default=False,
                      help="only log errors")
    parser.add_option("-v", "--verbose", action="store_true", dest="verbose",
                      default=False)
    return parser


def main(argv=None):
    parser = make_parser()
    (options, args) = parser.parse_args(argv)

    if len(args) < 1:
        parser.error("Input filename required")

    configure_logging(options.quiet, options.verbose)

    failed = 0
    for inFile in args:
        if len(args) > 1:
            print('%s:' % (inFile))
        try:
            list_rarc(inFile, options)
        except OSError as e:
            print("Input file could not be opened: %s" % (e), file=sys.stderr)
            failed += 1
        except RARCError as e:
            print("%s: %s: %s" % (inFile, type(e).__name__, e),
                  file=sys.stderr)
            failed += 1

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
