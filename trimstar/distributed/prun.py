"""Per-sample processing on the configured execution backend.
"""
from trimstar.fastq import trim
from trimstar.ngsalign import star
from trimstar.pipeline.config_utils import ExecMode


def sample_commands(sample, config, dirs, suffix, trim_cl, star_path):
    """Ordered trim and align steps for a sample.
    """
    return [("trim", trim.trim_cmd(sample, config.layout, suffix, dirs, config, trim_cl)),
            ("align", star.align_cmd(sample, config.layout, suffix, dirs, config, star_path))]

def get_runner(config, dirs, suffix):
    """Retrieve the runner for local foreground processing or cluster submission.
    """
    if config.mode == ExecMode.CLUSTER:
        from trimstar.distributed import cluster
        return cluster.ClusterRunner(config, dirs, suffix)
    elif config.mode == ExecMode.LOCAL:
        from trimstar.distributed import multi
        return multi.LocalRunner(config, dirs, suffix)
    else:
        raise ValueError("Unexpected execution mode: %s" % config.mode)
