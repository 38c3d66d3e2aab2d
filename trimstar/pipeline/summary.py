"""Final run status and per-sample manifest.
"""
import collections
import os
from datetime import datetime

import yaml

from trimstar.distributed.transaction import file_transaction
from trimstar.log import logger

SUMMARY_FILE = "run_summary.yaml"

RunSummary = collections.namedtuple(
    "RunSummary", ["mode", "attempted", "succeeded", "failed", "incomplete", "index_rebuilt"])


def summarize(mode, attempted, failed, records, index_rebuilt=False):
    """Collect per-sample status, counting samples whose completion marker exists.

    `failed` maps sample names to the reason they could not be processed;
    `records` are the job records dispatched during this run.
    """
    succeeded = [r.sample for r in records if os.path.exists(r.marker)]
    incomplete = [r.marker for r in records if not os.path.exists(r.marker)]
    return RunSummary(mode=mode, attempted=list(attempted), succeeded=succeeded,
                      failed=dict(failed), incomplete=incomplete, index_rebuilt=index_rebuilt)

def write_summary(dirs, summary):
    out_file = os.path.join(dirs.out, SUMMARY_FILE)
    out = {"date": str(datetime.now()),
           "mode": summary.mode.value,
           "index_rebuilt": summary.index_rebuilt,
           "attempted": len(summary.attempted),
           "succeeded": len(summary.succeeded),
           "samples": [{"name": name,
                        "status": ("succeeded" if name in summary.succeeded else
                                   "failed" if name in summary.failed else "incomplete"),
                        "error": summary.failed.get(name)}
                       for name in summary.attempted],
           "incomplete": summary.incomplete}
    with file_transaction(out_file) as tx_out_file:
        with open(tx_out_file, "w") as out_handle:
            yaml.safe_dump(out, out_handle, default_flow_style=False, allow_unicode=False)
    logger.info("%s/%s samples succeeded" % (len(summary.succeeded), len(summary.attempted)))
    for name, reason in sorted(summary.failed.items()):
        logger.warning("Sample %s failed: %s" % (name, reason.splitlines()[0] if reason else ""))
    return out_file
