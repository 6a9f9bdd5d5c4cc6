# coding= utf-8
"""
Implements a small Forth machine, i.e., an object capable of maintaining a
data stack, a dictionary of words and a handful of integer variables, and of
evaluating Forth text against them.

Usage should be as simple as:
    >>> import tinyforth
    >>> m = tinyforth.Machine()
    >>> m.evaluate(": square dup * ; 5 square")
    >>> m.data_stack
    [25]

Errors are raised as :exc:`tinyforth.ForthError` subclasses (StackUnderflow,
UnknownWord and friends). For a prompt-style answer instead, use
:meth:`Machine.eval`, which returns ' ok' or ' ? <what went wrong>'.

Or, from the command line, `tinyforth` (or `python -m tinyforth`) drops you
into the REPL until given an end of file (^D on Linux) or the BYE word.

There is no output, floating point or strings: the stack is inspected from
Python, or printed by the REPL after every line.
"""
from tinyforth.parser import *
from tinyforth.machine import *

__version__ = '0.1.0'
