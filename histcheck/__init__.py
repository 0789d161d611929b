"""
histcheck: consistency checking for distributed-system test histories.

Given the operations clients issued against a system under test, and the
completions they observed, decides whether that behaviour is consistent
with a declared datatype: a queue, a set, a counter, or any model fed to
an external linearizability oracle.
"""

__version__ = "0.1.0"
