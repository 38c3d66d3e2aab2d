"""Loads configurations from .yaml files and builds the run configuration.
"""
import collections
import enum
import os
import sys
import types

import toolz as tz
import yaml

from trimstar import utils
from trimstar.errors import CmdNotFound

SCHEDULERS = ("sge", "lsf", "slurm")
DEFAULT_POLL_INTERVAL = 300
DEFAULT_MAX_WAIT = 48 * 60 * 60


class Layout(enum.Enum):
    SINGLE = "single"
    PAIRED = "paired"

    @classmethod
    def from_string(cls, value):
        aliases = {"single": cls.SINGLE, "se": cls.SINGLE,
                   "paired": cls.PAIRED, "pe": cls.PAIRED}
        try:
            return aliases[str(value).lower()]
        except KeyError:
            raise ValueError("Unexpected library layout %s, expected single or paired" % value)


class ExecMode(enum.Enum):
    LOCAL = "local"
    CLUSTER = "cluster"


PipelineConfig = collections.namedtuple(
    "PipelineConfig",
    ["input_dir", "ref_file", "gtf_file", "layout", "out_dir", "mode", "trim_version",
     "cores", "queue", "scheduler", "poll_interval", "max_wait", "resources", "log_dir"])

# ## Generalized configuration

def load_config(config_file):
    """Load YAML config file, replacing environmental variables.
    """
    with open(config_file) as in_handle:
        config = yaml.safe_load(in_handle) or {}
    config = _expand_paths(config)
    if "resources" not in config:
        config["resources"] = {}
    # resource names are looked up lowercase
    newr = {}
    for k, v in config["resources"].items():
        if k.lower() != k:
            newr[k.lower()] = v
    config["resources"].update(newr)
    return config

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(config[field], dict):
            config[field] = _expand_paths(config[field])
        else:
            config[field] = expand_path(setting)
    return config

def expand_path(path):
    """ Combines os.path.expandvars with replacing ~ with $HOME.
    """
    try:
        return os.path.expandvars(path.replace("~", os.environ["HOME"]))
    except AttributeError:
        return path

def make_config(input_dir, ref_file, gtf_file, layout, out_dir, cluster=False,
                trim_version="0.39", system_config=None, **overrides):
    """Validate run parameters and build the immutable run configuration.

    Values from the command line in `overrides` take precedence over the
    optional YAML `system_config` dictionary.
    """
    system_config = system_config or {}
    def _setting(key, default):
        val = overrides.get(key)
        if val is None:
            val = system_config.get(key, default)
        return val
    layout = layout if isinstance(layout, Layout) else Layout.from_string(layout)
    scheduler = str(_setting("scheduler", "sge")).lower()
    if scheduler not in SCHEDULERS:
        raise ValueError("Unexpected scheduler %s, supported: %s" % (scheduler, ", ".join(SCHEDULERS)))
    cores = int(_setting("cores", 1))
    poll_interval = int(_setting("poll_interval", DEFAULT_POLL_INTERVAL))
    if cores < 1 or poll_interval < 1:
        raise ValueError("cores and poll_interval need to be positive: %s %s" % (cores, poll_interval))
    max_wait = _setting("max_wait", DEFAULT_MAX_WAIT)
    max_wait = int(max_wait) if max_wait not in (None, 0, "unlimited") else None
    out_dir = utils.get_abspath(out_dir)
    log_dir = _setting("log_dir", None)
    log_dir = utils.get_abspath(log_dir) if log_dir else os.path.join(out_dir, "log")
    resources = {k.lower(): v for k, v in (system_config.get("resources") or {}).items()}
    return PipelineConfig(
        input_dir=utils.get_abspath(input_dir),
        ref_file=utils.get_abspath(ref_file),
        gtf_file=utils.get_abspath(gtf_file),
        layout=layout,
        out_dir=out_dir,
        mode=ExecMode.CLUSTER if cluster else ExecMode.LOCAL,
        trim_version=str(trim_version),
        cores=cores,
        queue=_setting("queue", None),
        scheduler=scheduler,
        poll_interval=poll_interval,
        max_wait=max_wait,
        resources=types.MappingProxyType(dict(resources)),
        log_dir=log_dir)

# ## Retrieval functions

def get_resources(name, config):
    """Retrieve resources for a program, pulling from multiple config sources.

    A plain string entry is shorthand for the program command.
    """
    resources = tz.get_in(["resources", name.lower()], _as_dict(config),
                          tz.get_in(["resources", "default"], _as_dict(config), {}))
    if isinstance(resources, str):
        resources = {"cmd": resources}
    return resources

def _as_dict(config):
    if isinstance(config, PipelineConfig):
        return {"resources": config.resources}
    return config

def get_program(name, config, default=None, check=True):
    """Retrieve the command line of a program from the configuration.

    The `resources` section can give a `cmd` for each program. With `check`
    the command has to resolve to an executable, otherwise `CmdNotFound`.
    """
    pconfig = get_resources(name, config)
    if pconfig and "cmd" in pconfig:
        program = pconfig["cmd"]
    elif default is not None:
        program = default
    else:
        program = name
    program = expand_path(program)
    if not check:
        return program
    return _check_program(program, name)

def _check_program(program, name):
    is_ok = lambda f: os.path.isfile(f) and os.access(f, os.X_OK)
    if os.path.dirname(program):
        if is_ok(program):
            return program
    else:
        # support programs installed next to the running python
        if is_ok(os.path.join(os.path.dirname(sys.executable), program)):
            return os.path.join(os.path.dirname(sys.executable), program)
        for adir in os.environ.get("PATH", "").split(os.pathsep):
            if adir and is_ok(os.path.join(adir, program)):
                return os.path.join(adir, program)
    raise CmdNotFound("Could not find executable for %s: %s" % (name, program))
