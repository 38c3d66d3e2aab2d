"""Track per-sample completion through markers listed in the completion index.

The completion index is an append-only file with one expected marker path per
dispatched sample. A sample is complete once its marker exists.
"""
import collections
import os
import time

from trimstar.errors import PollTimeoutError
from trimstar.log import logger

JobRecord = collections.namedtuple("JobRecord", ["sample", "marker"])
TrackingResult = collections.namedtuple("TrackingResult", ["expected", "complete", "incomplete"])


def record_job(index_file, record):
    with open(index_file, "a") as out_handle:
        out_handle.write("%s\n" % record.marker)
    return record

def read_index(index_file):
    """Expected marker paths, in dispatch order, without repeats from earlier runs.
    """
    if not os.path.exists(index_file):
        return []
    with open(index_file) as in_handle:
        markers = [l.strip() for l in in_handle if l.strip()]
    return list(collections.OrderedDict.fromkeys(markers))

def check_markers(markers):
    complete = [m for m in markers if os.path.exists(m)]
    incomplete = [m for m in markers if not os.path.exists(m)]
    return TrackingResult(len(markers), len(complete), incomplete)

def check_completion(index_file):
    return check_markers(read_index(index_file))

def wait_for_completion(markers, interval, max_wait=None):
    """Block until every marker in `markers` exists.

    Callers pass the markers of jobs dispatched in this run, not the whole
    completion index, which keeps entries from earlier runs. Checks every
    `interval` seconds. With `max_wait` set, raises `PollTimeoutError` naming
    the incomplete markers once that many seconds have been spent waiting;
    without it, waits indefinitely.
    """
    waited = 0
    while True:
        status = check_markers(markers)
        if status.complete == status.expected:
            logger.info("All %s expected jobs complete" % status.expected)
            return status
        if max_wait is not None and waited >= max_wait:
            raise PollTimeoutError(status.incomplete, waited)
        logger.info("%s of %s jobs complete, checking again in %ss" %
                    (status.complete, status.expected, interval))
        to_sleep = interval if max_wait is None else max(1, min(interval, max_wait - waited))
        time.sleep(to_sleep)
        waited += to_sleep
