import argparse
import logging
import readline
import sys

from tinyforth.machine import Machine, ForthError

PROMPT = ''
GREETING = 'Type "BYE" or input an end of file (Ctrl+D) to quit.'

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())


def format_stack(stack):
    return ' '.join(str(cell) for cell in stack)


def forth_repl(m=None):
    print(GREETING)

    if m is None:
        m = Machine()

    try:
        cmd = input(PROMPT)
        while cmd.strip().casefold() != 'bye':
            response = m.eval(cmd)
            if m.data_stack:
                response = format_stack(m.data_stack) + response
            print(response)
            cmd = input(PROMPT)
    except EOFError:
        pass  # perfectly acceptable


def cli_main(argv=None):
    parser = argparse.ArgumentParser(
        description='Evaluate Forth, or start a Forth REPL',
        prog='tinyforth',
    )
    parser.add_argument('-e', '--eval', action='append', metavar='TEXT',
        help='evaluate TEXT and print the resulting stack (may be repeated)')
    parser.add_argument('-v', '--verbose', action='count', default=0,
        help='log definitions and loops (-vv to log every word)')
    parser.add_argument('--version', action='store_true', help='print version and exit')
    args = parser.parse_args(argv)

    if args.version:
        from tinyforth import __version__
        version = 'tinyforth {}'.format(__version__)
        raise SystemExit(version)

    log_fmt = '%(message)s'
    if args.verbose > 1:
        logging.basicConfig(format=log_fmt, level=logging.DEBUG, stream=sys.stdout)
    elif args.verbose:
        logging.basicConfig(format=log_fmt, level=logging.INFO, stream=sys.stdout)

    m = Machine()
    if not args.eval:
        forth_repl(m)
        return

    for text in args.eval:
        log.info('evaluating: {}'.format(text))
        try:
            m.evaluate(text)
        except ForthError as e:
            raise SystemExit('{}: {}'.format(type(e).__name__, e))
    print(format_stack(m.data_stack))


if __name__ == '__main__':
    cli_main()
