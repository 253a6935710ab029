"""
Progress bar of the slice loop. It shows the distance tracked along the
beamline and the element being tracked.
"""

import sys
import warnings

from tqdm import tqdm


# The accumulated slice lengths can exceed the total length by rounding
# errors, which tqdm reports as clamping warnings.
warnings.filterwarnings('ignore', '.*clamping.*', )


def get_progress_bar(description, total_length, n_elements, disable):
    """Get progress bar for the slice loop.

    Parameters
    ----------
    description : str
        Description to be appended to start of the progress bar.
    total_length : float
        Total length in metres of the elements to be tracked.
    n_elements : int
        Number of elements to be tracked.
    disable : bool
        Whether to disable (not show) the progress bar.

    Returns
    -------
    A tqdm progress bar.
    """
    l_bar = "{desc}: {percentage:3.0f}%|"
    r_bar = "| {n:.4f}/{total:.4f} {unit} [{elapsed}{postfix}]"
    progress_bar = tqdm(
        desc=description,
        total=total_length,
        unit='m',
        bar_format=l_bar + "{bar}" + r_bar,
        file=sys.stdout,
        disable=disable
    )
    progress_bar.n_elements = n_elements
    return progress_bar


def set_current_element(progress_bar, i_element, element):
    """ Show in the progress bar the element that is being tracked. """
    progress_bar.set_postfix_str(
        'element {}/{}: {}'.format(
            i_element + 1, progress_bar.n_elements, element.element_name),
        refresh=False)
