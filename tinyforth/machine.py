# coding= utf-8
from collections import namedtuple
import inspect
import logging
import types

from tinyforth.parser import Parser, is_number

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

DEFINE = ':'
END_DEFINE = ';'
VARIABLE = 'variable'
IF = 'if'
ELSE = 'else'
THEN = 'then'
DO = 'do'
LOOP = 'loop'

TRUE = -1
FALSE = 0

RESPONSE_OK = ' ok'
RESPONSE_ERROR = ' ? %s'


class ForthError(Exception): pass
class StackUnderflow(ForthError): pass
class UnknownWord(ForthError): pass
class MalformedDefinition(ForthError): pass
class MalformedDeclaration(ForthError): pass
class MalformedLoop(ForthError): pass
class LoopContextMissing(ForthError): pass
class UndeclaredVariable(ForthError): pass
class CellTypeError(ForthError): pass
class DivisionByZero(ForthError): pass


class VariableRef(namedtuple('VariableRef', ['name'])):
    """ A stack cell naming a variable, for @ and ! to resolve. """
    __slots__ = ()

    def __str__(self):
        return self.name


def _word(name):
    """
    Creates a decorator that adds a .word member to its given func, which may
    then be inspected for by the :class:`Machine`'s __init__ method. Note that
    if you already have an instance of :class:`Machine`, it's too late to
    decorate and you should call its :meth:`Machine.add_stackmethod`
    instead.
    """
    def decorator(func):
        func.word = name
        return func
    return decorator


def _floor_divide(b, a):
    if b == 0:
        raise DivisionByZero('division by zero')
    return a // b


class Machine(object):
    """
    A Forth machine. Besides the data stack and the dictionary of words it
    keeps its variables and the index of every DO loop currently running.

    Nothing is compiled: definitions and the bodies of IF and DO are kept as
    lists of words and simply evaluated again every time they run, so a word
    is looked up in the dictionary when it is called, not when it is defined.
    """
    def __init__(self):
        self.data_stack = []
        self.words = {}
        self.variables = {}
        self.loop_indices = []

        # Add decorated member words
        for name, method in inspect.getmembers(self, inspect.ismethod):
            if hasattr(method, 'word'):
                self.words[method.word.casefold()] = method

        # Add basic math and comparisons
        self.add_stackmethod('+', lambda b, a: a + b)
        self.add_stackmethod('-', lambda b, a: a - b)
        self.add_stackmethod('*', lambda b, a: a * b)
        self.add_stackmethod('/', _floor_divide)
        self.add_stackmethod('=', lambda b, a: TRUE if a == b else FALSE)
        self.add_stackmethod('<', lambda b, a: TRUE if a < b else FALSE)
        self.add_stackmethod('>', lambda b, a: TRUE if a > b else FALSE)

        # Stack handling shuffles any kind of cell around
        self.add_stackmethod('DUP', lambda a: (a, a), integers=False)
        self.add_stackmethod('DROP', lambda a: None, integers=False)
        self.add_stackmethod('SWAP', lambda b, a: (b, a), integers=False)
        self.add_stackmethod('OVER', lambda b, a: (a, b, a), integers=False)

    def _push(self, val):
        self.data_stack.append(val)

    def _push_all(self, ls):
        self.data_stack.extend(ls)

    def _require(self, count):
        if len(self.data_stack) < count:
            raise StackUnderflow('stack underflow')

    def _require_integers(self, count):
        self._require(count)
        for cell in self.data_stack[len(self.data_stack) - count:]:
            if not isinstance(cell, int):
                raise CellTypeError('expected a number, got variable %s' % cell)

    def _pop(self):
        self._require(1)
        return self.data_stack.pop()

    def _pop_integers(self, count):
        """ Pops `count` numbers, top first, or nothing at all. """
        self._require_integers(count)
        return [self.data_stack.pop() for x in range(count)]

    @_word('I')
    def _loop_i(self):
        if not self.loop_indices:
            raise LoopContextMissing('I outside of loop')
        self._push(self.loop_indices[-1])

    @_word('J')
    def _loop_j(self):
        if len(self.loop_indices) < 2:
            raise LoopContextMissing('J outside of nested loop')
        self._push(self.loop_indices[-2])

    @_word('@')
    def _fetch(self):
        self._require(1)
        ref = self.data_stack[-1]
        if not isinstance(ref, VariableRef) or ref.name not in self.variables:
            raise UndeclaredVariable('not a variable: %s' % ref)
        self.data_stack.pop()
        self._push(self.variables[ref.name])

    @_word('!')
    def _store(self):
        self._require(2)
        ref, value = self.data_stack[-1], self.data_stack[-2]
        if not isinstance(ref, VariableRef) or ref.name not in self.variables:
            raise UndeclaredVariable('not a variable: %s' % ref)
        if not isinstance(value, int):
            raise CellTypeError('cannot store variable %s in %s' % (value, ref))
        del self.data_stack[-2:]
        self.variables[ref.name] = value

    def add_stackmethod(self, word, func, integers=True):
        """
        Turns a given function `func` into a stack-consumer.

        The function will get its arguments from the stack automatically, in
        the order they pop off (so from the stack [1, 2] the call to a
        two-argument function will be func(2, 1)). The function's return value
        (or values) are assumed to go back on the stack.

        With `integers` set, every argument must be a number and a variable
        reference is refused with :exc:`CellTypeError`. Either way the stack
        is checked before anything is popped, so a word that can't run leaves
        the stack alone.
        """
        num_args = func.__code__.co_argcount
        def stack_helper(self):
            if integers:
                args = self._pop_integers(num_args)
            else:
                self._require(num_args)
                args = [self._pop() for x in range(num_args)]
            ret = func(*args)
            if ret is None:
                return
            if isinstance(ret, int):
                self._push(ret)
            else:
                self._push_all(ret)
        self.words[word.casefold()] = types.MethodType(stack_helper, self)

    def evaluate(self, source=''):
        """
        Runs `source` (text, or a list of words) against the machine.

        Errors are :exc:`ForthError` subclasses and are left to propagate.
        Nothing is rolled back: whatever ran before the failing word stays
        done.
        """
        parser = Parser(source)
        for word in parser.generate():
            self.interpret_one(word, parser)

    def eval(self, text=''):
        """ Like :meth:`evaluate`, but answers the way a Forth prompt does. """
        try:
            self.evaluate(text)
        except ForthError as e:
            return RESPONSE_ERROR % e
        return RESPONSE_OK

    def interpret_one(self, word, parser):
        log.debug('interpreting %r with stack %r', word, self.data_stack)
        if word == DEFINE:
            self.define_word(parser)
        elif word == VARIABLE:
            self.declare_variable(parser)
        elif word == IF:
            self.interpret_branch(parser)
        elif word == DO:
            self.interpret_loop(parser)
        elif word in self.variables:
            self._push(VariableRef(word))
        elif word in self.words:
            self.words[word]()
        elif is_number(word):
            self._push(int(word))
        else:
            raise UnknownWord('undefined word: %s' % word)

    def define_word(self, parser):
        new_word = parser.next_word()
        if new_word is None:
            raise MalformedDefinition('no name given')
        if is_number(new_word):
            raise MalformedDefinition('cannot redefine number %s' % new_word)

        (tokens,), terminated = parser.parse_block(END_DEFINE)
        if not terminated:
            raise MalformedDefinition('unclosed %s %s' % (DEFINE, new_word))

        body = lambda self: self.evaluate(tokens)
        self.words[new_word] = types.MethodType(body, self)
        log.info('defined %s as %s', new_word, ' '.join(tokens))

    def declare_variable(self, parser):
        name = parser.next_word()
        if name is None:
            raise MalformedDeclaration('no variable name given')
        self.variables[name] = 0
        log.info('declared variable %s', name)

    def interpret_branch(self, parser):
        testvar, = self._pop_integers(1)

        parts, terminated = parser.parse_block(THEN, opener=IF, divider=ELSE)
        true_tokens = parts[0]
        false_tokens = parts[1] if len(parts) > 1 else []
        if not terminated:
            log.debug('unclosed %s ran to the end of input', IF)

        tokens = true_tokens if testvar != 0 else false_tokens
        if tokens:
            self.evaluate(tokens)

    def interpret_loop(self, parser):
        index, loop_end = self._pop_integers(2)

        (tokens,), terminated = parser.parse_block(LOOP, opener=DO)
        if not terminated:
            raise MalformedLoop('unclosed %s' % DO)

        log.info('looping from %d up to %d over %s', index, loop_end, ' '.join(tokens))
        for i in range(index, loop_end):
            self.loop_indices.append(i)
            try:
                self.evaluate(tokens)
            finally:
                self.loop_indices.pop()
