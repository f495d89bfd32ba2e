"""
_context.py
===========
Context managers that adjust exsub logging for the duration of a block.

The package logs through one logger per module, all children of ``exsub``.
Raising the level of a child silences one stage (for instance the per-tree
messages of a long collection); raising the parent silences the package.
"""

import logging
from contextlib import contextmanager


# Parent logger of every exsub module logger.
PACKAGE_LOGGER = "exsub"


@contextmanager
def suppress_logger(logger_name: str, level: int = logging.CRITICAL):
    """
    Set the level of logger *logger_name* inside the ``with`` block.

    The previous level is put back when the block exits, also when it
    raises, so calls may be nested.

    Parameters
    ----------
    logger_name : str
        Logger to adjust, e.g. ``'exsub._logging'`` for the collection and
        summary messages or ``'exsub._subdivision'`` for the per-taxon trace.
    level : int, default logging.CRITICAL
        Level in effect inside the block.  A low level such as
        ``logging.DEBUG`` turns a logger up instead of down.

    Examples
    --------
    >>> with suppress_logger('exsub._logging'):
    ...     d = Delimitation(trees)

    >>> with suppress_logger('exsub._subdivision', logging.DEBUG):
    ...     d.species_ids
    """
    target = logging.getLogger(logger_name)
    saved = target.level
    target.setLevel(level)
    try:
        yield target
    finally:
        target.setLevel(saved)


@contextmanager
def quiet(level: int = logging.CRITICAL):
    """
    Raise the ``exsub`` package logger to *level* inside the block.

    Module loggers without a level of their own inherit it.

    >>> with quiet(logging.WARNING):
    ...     newick = Delimitation(trees).newick()
    """
    with suppress_logger(PACKAGE_LOGGER, level) as target:
        yield target
