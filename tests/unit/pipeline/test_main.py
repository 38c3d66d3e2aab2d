"""Full runs against stand-in STAR and Trimmomatic executables"""

import os

import pytest
import yaml

from trimstar.errors import (CmdNotFound, IndexBuildError, NoInputFilesError, PollTimeoutError,
                             RunLockedError)
from trimstar.pipeline import main, summary
from trimstar.pipeline.config_utils import ExecMode
from tests.unit.conftest import FAILING, make_fastqs, read_calls, write_exe

FAIL_ON_BAD = """#!/bin/bash
echo "$@" >> CALLS_FILE
case "$*" in
  *bad_1*) echo "Exception in thread main: corrupt input" >&2; exit 1;;
esac
mode=$1
shift 4
if [ "$mode" = "PE" ]; then
  shift 2
  for f in "$1" "$2" "$3" "$4"; do echo trimmed > "$f"; done
else
  shift 1
  echo trimmed > "$1"
fi
"""


def _load_summary(config):
    with open(os.path.join(config.out_dir, summary.SUMMARY_FILE)) as in_handle:
        return yaml.safe_load(in_handle)


def _genome_builds(calls_file):
    return [c for c in read_calls(calls_file) if "genomeGenerate" in c]


def test_local_paired_run(make_run_config, fake_star, fake_trimmomatic):
    config = make_run_config()
    make_fastqs(config.input_dir, ["s1", "s2"], suffix=".fastq.gz")
    result = main.run_main(config)
    assert result.mode == ExecMode.LOCAL
    assert result.succeeded == ["s1", "s2"]
    assert result.failed == {}
    assert result.index_rebuilt is True
    for name in ["s1", "s2"]:
        assert os.path.exists(os.path.join(config.out_dir, "STAR_aln", name, "Log.final.out"))
        assert os.path.exists(os.path.join(config.out_dir, "trimmed_files", "%s_2_trim_orph.gz" % name))
    aligns = [c for c in read_calls(fake_star[1]) if "alignReads" in c]
    assert len(aligns) == 2
    assert all("--readFilesCommand gunzip -c" in c for c in aligns)
    assert not os.path.exists(os.path.join(config.out_dir, main.LOCK_FILE))
    out = _load_summary(config)
    assert out["attempted"] == 2 and out["succeeded"] == 2
    assert [s["status"] for s in out["samples"]] == ["succeeded", "succeeded"]


def test_local_single_plain_run(make_run_config, fake_star, fake_trimmomatic):
    config = make_run_config(layout="single")
    make_fastqs(config.input_dir, ["s1"], paired=False)
    result = main.run_main(config)
    assert result.succeeded == ["s1"]
    trims = read_calls(fake_trimmomatic[1])
    assert len(trims) == 1 and trims[0].startswith("SE ")
    aligns = [c for c in read_calls(fake_star[1]) if "alignReads" in c]
    assert "--readFilesCommand" not in aligns[0]


def test_rerun_reuses_index(make_run_config, fake_star, fake_trimmomatic):
    config = make_run_config()
    make_fastqs(config.input_dir, ["s1"])
    main.run_main(config)
    result = main.run_main(config)
    assert result.index_rebuilt is False
    assert len(_genome_builds(fake_star[1])) == 1
    assert result.succeeded == ["s1"]


def test_changed_reference_rebuilds_index(make_run_config, fake_star, fake_trimmomatic, tmp_path):
    config = make_run_config()
    make_fastqs(config.input_dir, ["s1"])
    main.run_main(config)
    other_ref = tmp_path / "ref" / "other.fa"
    other_ref.write_text(">chr2\nTTTT\n")
    result = main.run_main(config._replace(ref_file=str(other_ref)))
    assert result.index_rebuilt is True
    assert len(_genome_builds(fake_star[1])) == 2


def test_local_sample_failure_continues(make_run_config, fake_star, bin_dir):
    calls = os.path.join(bin_dir, "bad_trim_calls.txt")
    trimmer = write_exe(os.path.join(bin_dir, "trim_fail_bad"), FAIL_ON_BAD, calls)
    config = make_run_config(resources={"trimmomatic": {"cmd": trimmer, "adapters": "/a.fa"}})
    make_fastqs(config.input_dir, ["bad", "good"])
    result = main.run_main(config)
    assert result.succeeded == ["good"]
    assert list(result.failed) == ["bad"]
    assert "corrupt input" in result.failed["bad"]
    out = _load_summary(config)
    status = {s["name"]: s["status"] for s in out["samples"]}
    assert status == {"bad": "failed", "good": "succeeded"}


def test_index_failure_is_fatal(make_run_config, fake_trimmomatic, bin_dir):
    calls = os.path.join(bin_dir, "fail_calls.txt")
    bad_star = write_exe(os.path.join(bin_dir, "STAR_broken"), FAILING, calls)
    config = make_run_config(resources={"star": {"cmd": bad_star}})
    make_fastqs(config.input_dir, ["s1"])
    with pytest.raises(IndexBuildError) as excinfo:
        main.run_main(config)
    assert "FATAL ERROR" in str(excinfo.value)
    assert len(read_calls(calls)) == 1
    assert not os.path.exists(os.path.join(config.out_dir, main.LOCK_FILE))


def test_missing_inputs_are_fatal(make_run_config):
    config = make_run_config()
    os.makedirs(config.input_dir)
    with pytest.raises(NoInputFilesError):
        main.run_main(config)
    assert not os.path.exists(config.out_dir)


def test_missing_trimmer_is_fatal(make_run_config, fake_star):
    config = make_run_config(resources={"trimmomatic": {"cmd": "/no/such/trimmomatic"}})
    make_fastqs(config.input_dir, ["s1"])
    with pytest.raises(CmdNotFound):
        main.run_main(config)


def test_locked_output_directory(make_run_config, fake_star, fake_trimmomatic):
    config = make_run_config()
    make_fastqs(config.input_dir, ["s1"])
    os.makedirs(config.out_dir)
    lock_file = os.path.join(config.out_dir, main.LOCK_FILE)
    with open(lock_file, "w") as out_handle:
        out_handle.write("otherhost:1\n")
    with pytest.raises(RunLockedError):
        main.run_main(config)
    assert os.path.exists(lock_file)
    assert not os.path.exists(os.path.join(config.out_dir, "genome"))
    assert read_calls(fake_star[1]) == []


def _finish_job(scheduler_args, script, name, log_file, queue=None, cores=1):
    from trimstar.provenance.do import CommandResult
    with open(os.path.join(os.path.dirname(log_file), "Log.final.out"), "w") as out_handle:
        out_handle.write("finished\n")
    return CommandResult(("qsub",), 0, 'Your job 1 ("%s") has been submitted' % name, ""), "1"


def test_cluster_run(make_run_config, fake_star, mocker):
    config = make_run_config(cluster=True, poll_interval=1)
    make_fastqs(config.input_dir, ["s1", "s2"])
    submit = mocker.patch("trimstar.distributed.sge.submit_job", side_effect=_finish_job)
    sleep = mocker.patch("trimstar.distributed.tracker.time.sleep")
    result = main.run_main(config)
    assert submit.call_count == 2
    assert not sleep.called
    assert result.mode == ExecMode.CLUSTER
    assert result.succeeded == ["s1", "s2"]
    with open(os.path.join(config.out_dir, "STAR_aln", "index")) as in_handle:
        assert len(in_handle.readlines()) == 2


def test_cluster_timeout_writes_summary(make_run_config, fake_star, mocker):
    config = make_run_config(cluster=True, poll_interval=10, max_wait=30)
    make_fastqs(config.input_dir, ["s1"])
    mocker.patch("trimstar.distributed.sge.submit_job",
                 return_value=(mocker.Mock(ok=True), "7"))
    mocker.patch("trimstar.distributed.tracker.time.sleep")
    with pytest.raises(PollTimeoutError) as excinfo:
        main.run_main(config)
    assert excinfo.value.incomplete == [os.path.join(config.out_dir, "STAR_aln", "s1", "Log.final.out")]
    out = _load_summary(config)
    assert out["succeeded"] == 0
    assert out["samples"][0]["status"] == "incomplete"
    assert not os.path.exists(os.path.join(config.out_dir, main.LOCK_FILE))


def test_cluster_submission_failure_continues(make_run_config, fake_star, mocker):
    from trimstar.provenance.do import CommandResult
    config = make_run_config(cluster=True)
    make_fastqs(config.input_dir, ["s1", "s2"])

    def submit(scheduler_args, script, name, log_file, queue=None, cores=1):
        if name.endswith("s1"):
            return CommandResult(("qsub",), 1, "", "queue disabled"), None
        return _finish_job(scheduler_args, script, name, log_file, queue, cores)
    mocker.patch("trimstar.distributed.sge.submit_job", side_effect=submit)
    result = main.run_main(config)
    assert result.succeeded == ["s2"]
    assert "queue disabled" in result.failed["s1"]
    assert os.path.exists(os.path.join(config.out_dir, "STAR_aln", "s1.job.sh"))


def test_cluster_rerun_waits_only_on_dispatched_samples(make_run_config, fake_star, bin_dir, mocker):
    calls = os.path.join(bin_dir, "bad_trim_calls.txt")
    trimmer = write_exe(os.path.join(bin_dir, "trim_fail_bad"), FAIL_ON_BAD, calls)
    local_config = make_run_config(resources={"trimmomatic": {"cmd": trimmer, "adapters": "/a.fa"}})
    make_fastqs(local_config.input_dir, ["bad", "good"])
    first = main.run_main(local_config)
    assert list(first.failed) == ["bad"]
    for read in ["1", "2"]:
        os.remove(os.path.join(local_config.input_dir, "bad_%s.fastq" % read))

    config = make_run_config(cluster=True, poll_interval=10, max_wait=30)
    mocker.patch("trimstar.distributed.sge.submit_job", side_effect=_finish_job)
    sleep = mocker.patch("trimstar.distributed.tracker.time.sleep")
    result = main.run_main(config)
    assert result.succeeded == ["good"]
    assert result.incomplete == []
    assert not sleep.called
    bad_marker = os.path.join(config.out_dir, "STAR_aln", "bad", "Log.final.out")
    with open(os.path.join(config.out_dir, "STAR_aln", "index")) as in_handle:
        assert bad_marker in [l.strip() for l in in_handle]
