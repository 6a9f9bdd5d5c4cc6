# coding= utf-8
"""
Very simple Forth parser -- not much more than a queue of words and the one
scanning primitive the control structures need.

The parser is stateful, in as much as each instance is given an initial
string (or list of words) to operate on, and every call to next_word or
parse_block consumes words from the front of it. The parser is not a compiler:
nothing is turned into a tree, the :class:`tinyforth.Machine` simply pulls
words off the front and decides for itself what they mean.

As an example, `Parser(": STAR 42 * ;")` knows nothing about definitions; it
yields ':', 'star', '42', '*' and ';' and leaves it to the machine to notice
that ':' should go on to grab everything up to the ';'.
"""
from collections import deque
import re

NUMBER_PATTERN = re.compile(r'^-?\d+$')


def is_number(word):
    return NUMBER_PATTERN.match(word) is not None


class Parser(object):
    """
    A queue of case-folded words, consumed strictly from the front.

    Text input is folded and split on any whitespace; an already-split
    sequence is folded word by word and copied, so the caller's list is never
    touched by consuming the parser.
    """
    def __init__(self, source=''):
        if isinstance(source, str):
            words = source.casefold().split()
        else:
            words = [word.casefold() for word in source]
        self.words = deque(words)

    @property
    def is_finished(self):
        return not self.words

    def next_word(self):
        """ Removes and returns the front word, or None once we're empty. """
        if self.is_finished:
            return None
        return self.words.popleft()

    def remaining(self):
        return list(self.words)

    def generate(self):
        # Checked every time around, since whoever we yield to is free to eat
        # more words off the front before asking for the next one.
        while not self.is_finished:
            yield self.words.popleft()

    def parse_block(self, closer, opener=None, divider=None):
        """
        Consume words up to the `closer` at nesting depth zero.

        Every `opener` bumps the depth and every `closer` above depth zero
        drops it again; both are kept in the block, so a nested construct
        comes out intact and gets scanned again once it is itself run. A
        `divider` at depth zero starts a second part (further dividers at
        depth zero are thrown away). Words belonging to any other construct
        mean nothing here.

        Returns `(parts, terminated)`: a list of one or two word lists, and
        whether the closer was actually found before the input ran out.
        """
        parts = [[]]
        depth = 0
        for word in self.generate():
            if word == closer and depth == 0:
                return parts, True

            if word == divider and depth == 0:
                if len(parts) == 1:
                    parts.append([])
                continue

            if word == opener:
                depth += 1
            elif word == closer:
                depth -= 1
            parts[-1].append(word)

        return parts, False
