"""Turns live records into display lines.

Modules
-------
engine
    ``ProjectionEngine`` resolves the selected paths against a record and
    renders them as ``path: value`` pairs.
batching
    Output stages between record arrival and broadcast: pass-through or a
    time-window batch.
"""
