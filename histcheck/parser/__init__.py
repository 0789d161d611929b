"""
EDN reader for persisted histories.

Provides lexical analysis and parsing for the EDN subset harnesses use
to record operations, one map per line.
"""
