#!/usr/bin/env python -Es
"""Trim and align a directory of RNA-seq fastq files with Trimmomatic and STAR.

Runs locally, processing one sample after another, or submits one job per
sample to a batch scheduler and waits for all of them to finish.

The optional <config file> is a YAML file specifying program locations and
cluster parameters; command line options override its values.

Usage:
  trimstar_pipeline.py <input_dir> <reference> <annotation> <layout> <output_dir>
     --cluster submit samples to the scheduler instead of running locally
     -t Trimmomatic version to use
     -c YAML system configuration
     -n cores for each trimming and alignment command
     -s scheduler for cluster submission (sge, lsf, slurm)
     -q queue to submit jobs to
"""
import argparse
import sys

from trimstar import log
from trimstar.errors import PipelineError
from trimstar.log import logger
from trimstar.pipeline import config_utils, version
from trimstar.pipeline.main import run_main


def main(args):
    system_config = config_utils.load_config(args.config) if args.config else {}
    try:
        config = config_utils.make_config(
            args.input_dir, args.reference, args.annotation, args.layout, args.output_dir,
            cluster=args.cluster, trim_version=args.trim_version, system_config=system_config,
            cores=args.numcores, queue=args.queue, scheduler=args.scheduler,
            poll_interval=args.poll_interval, max_wait=args.max_wait, log_dir=args.log_dir)
    except ValueError as e:
        sys.exit("Invalid configuration: %s" % e)
    handler = log.setup_local_logging({"log_dir": config.log_dir,
                                       "log_level": system_config.get("log_level", "INFO")})
    try:
        logger.info("trimstar %s, %s mode" % (version.__version__, config.mode.value))
        run_main(config)
    except PipelineError as e:
        logger.error(str(e))
        return 1
    finally:
        handler.pop_thread()
        handler.close()
    return 0

def parse_cl_args(in_args):
    description = "Trim and align RNA-seq reads with Trimmomatic and STAR."
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("input_dir", help="Directory of *.fastq or *.fastq.gz files")
    parser.add_argument("reference", help="Reference genome fasta file")
    parser.add_argument("annotation", help="Gene annotation GTF file")
    parser.add_argument("layout", choices=["single", "paired", "se", "pe"],
                        help="Library layout of the input reads")
    parser.add_argument("output_dir", help="Directory to write results to")
    parser.add_argument("--cluster", action="store_true", default=False,
                        help="Submit samples as jobs to a batch scheduler")
    parser.add_argument("-t", "--trim-version", default="0.39",
                        help="Trimmomatic version to use. Defaults to 0.39")
    parser.add_argument("-c", "--config",
                        help="YAML system configuration with program resources")
    parser.add_argument("-n", "--numcores", type=int,
                        help="Cores to use for each trimming and alignment command")
    parser.add_argument("-s", "--scheduler", choices=list(config_utils.SCHEDULERS),
                        help="Scheduler to submit cluster jobs with. Defaults to sge")
    parser.add_argument("-q", "--queue", help="Scheduler queue to run jobs on")
    parser.add_argument("--poll-interval", type=int,
                        help="Seconds between checks for finished cluster jobs. Defaults to 300")
    parser.add_argument("--max-wait",
                        help=("Seconds to wait for cluster jobs before giving up, "
                              "or 'unlimited'. Defaults to 48 hours"))
    parser.add_argument("--log-dir", help="Directory for log files. Defaults to <output_dir>/log")
    parser.add_argument("-v", "--version", action="version", version=version.__version__)
    args = parser.parse_args(in_args)
    if args.max_wait and args.max_wait != "unlimited":
        try:
            args.max_wait = int(args.max_wait)
        except ValueError:
            parser.error("--max-wait needs a number of seconds or 'unlimited': %s" % args.max_wait)
    return args

if __name__ == "__main__":
    sys.exit(main(parse_cl_args(sys.argv[1:])))
