"""Combinators - composing machines sequentially and side by side."""

from pullflow.kernel import Machine

from .automata import Automaton, Mealy, Moore, auto
from .pipe import cap, compose, identity, pass_through
from .process import (
    buffered,
    dropping,
    dropping_while,
    filtered,
    mapped,
    prepended,
    supply,
    taking,
    taking_while,
)
from .source import cycled, repeated, source
from .tee import add_left, add_right, cap_left, cap_right, interleave, tee, zip_with

Machine.register_op("pipe", compose)
Machine.register_op("supply", lambda machine, values: supply(values, machine))

__all__ = [
    # Sequential
    "compose",
    "identity",
    "pass_through",
    "cap",
    # Processes
    "filtered",
    "mapped",
    "dropping",
    "taking",
    "dropping_while",
    "taking_while",
    "buffered",
    "prepended",
    "supply",
    # Sources
    "source",
    "repeated",
    "cycled",
    # Tees
    "tee",
    "add_left",
    "add_right",
    "cap_left",
    "cap_right",
    "zip_with",
    "interleave",
    # Automata
    "Automaton",
    "Moore",
    "Mealy",
    "auto",
]
