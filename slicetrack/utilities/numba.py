"""This module contains custom definitions of the numba decorators."""

import os

from numba import njit, __version__ as numba_version

if numba_version == '0.57.0':
    raise RuntimeError(
        'SliceTrack is incompatible with numba 0.57.0.\n'
        'Please install either a later or an earlier version.'
    )


# Check if the environment variable SLICETRACK_DISABLE_CACHING is set to 1
# and in that case, disable caching
caching = True
if 'SLICETRACK_DISABLE_CACHING' in os.environ:
    if int(os.environ['SLICETRACK_DISABLE_CACHING']) == 1:
        caching = False


# Number of worker threads among which the particle tiles are distributed.
num_threads = 1
if 'SLICETRACK_NUM_THREADS' in os.environ:
    num_threads = int(os.environ['SLICETRACK_NUM_THREADS'])


# Define custom njit decorator for serial methods. The GIL is released so
# that several tiles can be pushed at the same time from a thread pool.
def njit_serial(*args, **kwargs):
    return njit(*args, cache=caching, nogil=True, **kwargs)


__all__ = ['njit_serial', 'num_threads']
