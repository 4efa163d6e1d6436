"""Command-line interface for keynotes."""


import argparse
import json
import logging
import sys
from terminaltables import AsciiTable
from keynotes.conf import KeynotesConf
from keynotes.errors import ConfigError, CorruptedFormatError, Error, StorageError
from keynotes.store import KeynoteFile


def _add_section(args, kn: KeynoteFile) -> int:
    name = args.name[0]
    kn.add_section(name)
    print(f'Added section {name}')
    return 0


def _rm_section(args, kn: KeynoteFile) -> int:
    name = args.name[0]
    kn.remove_section(name)
    print(f'Removed section {name}')
    return 0


def _sections(args, kn: KeynoteFile) -> int:
    names = sorted(kn.get_sections())
    if args.json:
        print(json.dumps(names))
    elif not names:
        print('keynotes data file is empty')
    else:
        for name in names:
            print(name)
    return 0


def _add(args, kn: KeynoteFile) -> int:
    section, key, value = args.section[0], args.key[0], args.value[0]
    kn.add_entry(section, key, value)
    print(f'Added {key} to {section}')
    return 0


def _rm(args, kn: KeynoteFile) -> int:
    key = args.key[0]
    kn.remove_entry(key)
    print(f'Removed key {key}')
    return 0


def _keys(args, kn: KeynoteFile) -> int:
    sections = [kn.sections[name] for name in sorted(kn.get_sections())]
    if args.json:
        print(json.dumps([s.as_json() for s in sections]))
    elif args.table:
        data = [('Section', 'Key')]
        for section in sections:
            data.extend((section.name, key) for key in sorted(section.entries))
        table = AsciiTable(data)
        print(table.table)
    else:
        for section in sections:
            if not section.entries:
                continue
            print(section.name)
            for key in sorted(section.entries):
                print(f'\t{key}')
    return 0


def _get(args, kn: KeynoteFile) -> int:
    key = args.key[0]
    value = kn.get_value(key)
    if value is None:
        print(f'key {key} does not exist', file=sys.stderr)
    elif args.json:
        print(json.dumps({key: value}))
    else:
        print(f'{key}: {value}')
    return 0


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='keynotes')
    parser.set_defaults(func=None)
    parser.add_argument('-f', '--file', nargs=1,
                        help='Data file to use instead of the one configured in ~/.keynotes.conf.py '
                             '(by default, ~/.keynotes/keynotes.dat).')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debugging details to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_as = subs.add_parser('add-section', aliases=['as'],
                           help='Add a section. Section names must be alphabetic and unique.')
    p_as.add_argument('name', nargs=1)
    p_as.set_defaults(func=_add_section)

    p_rs = subs.add_parser('rm-section', aliases=['rs'], help='Remove a section and every entry in it.')
    p_rs.add_argument('name', nargs=1)
    p_rs.set_defaults(func=_rm_section)

    p_ls = subs.add_parser('sections', aliases=['ls'], help='List section names.')
    p_ls.add_argument('-j', '--json', action='store_true', help='Output as a JSON array.')
    p_ls.set_defaults(func=_sections)

    p_ak = subs.add_parser('add', aliases=['ak'],
                           help='Add a key-value entry to a section. Keys must be unique across all sections; '
                                'keys may not contain ">" and values may not contain "<~>".')
    p_ak.add_argument('section', nargs=1, help='Section to add the entry to.')
    p_ak.add_argument('key', nargs=1)
    p_ak.add_argument('value', nargs=1)
    p_ak.set_defaults(func=_add)

    p_rk = subs.add_parser('rm', aliases=['rk'], help='Remove the entry with the given key.')
    p_rk.add_argument('key', nargs=1)
    p_rk.set_defaults(func=_rm)

    p_lk = subs.add_parser('keys', aliases=['lk'], help='List keys, grouped by section.')
    p_lk_formats = p_lk.add_mutually_exclusive_group()
    p_lk_formats.add_argument('-j', '--json', action='store_true',
                              help='Output as JSON. The output is an array of objects, each with the section '
                                   '"name" and its "entries" as an object mapping keys to values.')
    p_lk_formats.add_argument('-t', '--table', action='store_true', help='Format output as a table.')
    p_lk.set_defaults(func=_keys)

    p_ld = subs.add_parser('get', aliases=['ld'], help='Show the value stored under a key.')
    p_ld.add_argument('key', nargs=1)
    p_ld.add_argument('-j', '--json', action='store_true', help='Output as a JSON object.')
    p_ld.set_defaults(func=_get)

    return parser


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.

    Expected problems, such as a duplicate key, are printed and still result in exit code 0.
    A corrupted or unreadable data file results in exit code 1.
    """
    parser = argparser()
    args = parser.parse_args(args)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    if not args.func:
        parser.print_help()
        return 1
    try:
        conf = KeynotesConf(data_path=args.file[0]) if args.file else KeynotesConf.for_user()
        kn = conf.instantiate()
        return args.func(args, kn)
    except (ConfigError, CorruptedFormatError, StorageError) as e:
        print(f'error: {e.message}', file=sys.stderr)
        return 1
    except Error as e:
        print(e.message, file=sys.stderr)
        return 0
