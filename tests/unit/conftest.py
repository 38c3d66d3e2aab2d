"""Pytest fixtures and test helper functions"""

import os
import stat

import pytest

from trimstar.pipeline import config_utils

FAKE_STAR = """#!/bin/bash
echo "$@" >> CALLS_FILE
mode=""; gdir=""; fasta=""; prefix=""
while [ $# -gt 0 ]; do
  case "$1" in
    --runMode) mode=$2; shift 2;;
    --genomeDir) gdir=$2; shift 2;;
    --genomeFastaFiles) fasta=$2; shift 2;;
    --outFileNamePrefix) prefix=$2; shift 2;;
    *) shift;;
  esac
done
if [ "$mode" = "genomeGenerate" ]; then
  echo index > "$gdir/Genome"
  echo index > "$gdir/SA"
  printf "versionGenome\\t2.7.4a\\ngenomeFastaFiles\\t%s\\n" "$fasta" > "$gdir/genomeParameters.txt"
else
  mkdir -p "$prefix"
  echo finished > "${prefix}Log.final.out"
fi
"""

FAKE_TRIMMOMATIC = """#!/bin/bash
echo "$@" >> CALLS_FILE
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

FAILING = """#!/bin/bash
echo "$@" >> CALLS_FILE
echo "EXITING because of FATAL ERROR in input" >&2
exit 1
"""


def write_exe(path, content, calls_file):
    with open(path, "w") as out_handle:
        out_handle.write(content.replace("CALLS_FILE", calls_file))
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR)
    return path


def make_fastqs(input_dir, names, suffix=".fastq", paired=True):
    os.makedirs(input_dir, exist_ok=True)
    files = []
    for name in names:
        for read in (["1", "2"] if paired else ["1"]):
            fname = os.path.join(input_dir, "%s_%s%s" % (name, read, suffix))
            with open(fname, "w") as out_handle:
                out_handle.write("@r1\nACGT\n+\nIIII\n")
            files.append(fname)
    return files


def read_calls(calls_file):
    if not os.path.exists(calls_file):
        return []
    with open(calls_file) as in_handle:
        return [l.strip() for l in in_handle if l.strip()]


@pytest.fixture
def bin_dir(tmp_path):
    """Executable stand-ins for STAR and Trimmomatic, logging each call"""
    bdir = tmp_path / "bin"
    bdir.mkdir()
    return str(bdir)


@pytest.fixture
def fake_star(bin_dir):
    calls = os.path.join(bin_dir, "star_calls.txt")
    return write_exe(os.path.join(bin_dir, "STAR"), FAKE_STAR, calls), calls


@pytest.fixture
def fake_trimmomatic(bin_dir):
    calls = os.path.join(bin_dir, "trim_calls.txt")
    return write_exe(os.path.join(bin_dir, "trimmomatic"), FAKE_TRIMMOMATIC, calls), calls


@pytest.fixture
def ref_files(tmp_path):
    ref_dir = tmp_path / "ref"
    ref_dir.mkdir()
    ref = ref_dir / "genome.fa"
    ref.write_text(">chr1\nACGTACGTACGT\n")
    gtf = ref_dir / "genes.gtf"
    gtf.write_text('chr1\ttest\texon\t1\t12\t.\t+\t.\tgene_id "g1";\n')
    return str(ref), str(gtf)


@pytest.fixture
def make_run_config(tmp_path, ref_files, fake_star, fake_trimmomatic):
    """Build run configurations pointing at the fake tools"""
    def _make(layout="paired", cluster=False, resources=None, **overrides):
        system_config = {"resources": {"star": {"cmd": fake_star[0]},
                                       "trimmomatic": {"cmd": fake_trimmomatic[0],
                                                       "adapters": "/adapters/TruSeq3.fa"}}}
        system_config["resources"].update(resources or {})
        return config_utils.make_config(
            str(tmp_path / "input"), ref_files[0], ref_files[1], layout, str(tmp_path / "out"),
            cluster=cluster, system_config=system_config, **overrides)
    return _make
