import glob
import importlib
import logging
import os

import yaml

from .processors import __all__ as builtin_processors
from .requestutil import make_join
from .value import Options, value_processor

logger = logging.getLogger("resolvecss")

DEFAULT_OUTPUT = "dist"

REWRITE_DEFAULTS = {
    "root": "~",
    "absolute": False,
    "keep_query": False,
    "root_dir": None,
}


class ConfigError(Exception):
    pass


class Input:
    def __init__(self, name, path, processors=None, depends=None, asset=None):
        self.name = name
        self.path = path
        self.asset = asset
        self.processors = processors or []
        self.depends = depends or []

    def __str__(self):
        return self.name

    @property
    def directory(self):
        return os.path.dirname(self.path)

    def check_paths(self):
        yield self.path
        for dep in self.depends:
            yield from glob.iglob(os.path.join(self.directory, dep))

    def modified(self, mtime):
        for path in self.check_paths():
            if os.path.getmtime(path) > mtime:
                return True
        return False

    def process(self, packer):
        with open(self.path, "r", encoding="utf-8") as f:
            text = f.read()
        for proc in self.processors:
            module_name, method_name = proc.rsplit(".", 1)
            module = importlib.import_module(module_name)
            method = getattr(module, method_name)
            text = method(text, self, packer)
        return text


class Packer:
    def __init__(self, config=None, base_dir=None, **options):
        self.base_dir = base_dir
        config_opts = self.load_config(
            config or "resolvecss.yaml", raise_if_missing=bool(config)
        )
        config_opts.update(options)
        self.configure(config_opts)

    def resolve(self, path):
        path = str(path)
        if os.path.isabs(path) or not self.base_dir:
            return path
        return os.path.abspath(os.path.normpath(os.path.join(self.base_dir, path)))

    def load_config(self, config_file, raise_if_missing=False):
        try:
            with open(self.resolve(config_file), "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            if raise_if_missing:
                raise
        return {}

    def dump_config(self):
        defaults = self.defaults.copy()
        if defaults.get("css") == ["rewrite"]:
            defaults.pop("css")
        register = {
            name: method
            for name, method in self.processors.items()
            if name not in builtin_processors
        }
        rewrite = {
            key: value
            for key, value in self.rewrite.items()
            if REWRITE_DEFAULTS[key] != value
        }
        config = {
            "assets": self.assets,
        }
        if self.location != DEFAULT_OUTPUT:
            config["output"] = self.location
        if self.search != ["."]:
            config["search"] = self.search
        if register:
            config["register"] = register
        if defaults:
            config["defaults"] = defaults
        if self.concat:
            config["concat"] = self.concat
        if rewrite:
            config["rewrite"] = rewrite
        return config

    def configure(self, config):
        self.location = config.get("output") or DEFAULT_OUTPUT
        self.search = config.get("search", ".")
        if isinstance(self.search, str):
            self.search = [self.search]
        self.processors = {
            name: "resolvecss.processors.{}.process".format(name)
            for name in builtin_processors
        }
        self.processors.update(config.get("register", {}))
        self.defaults = {"css": ["rewrite"]}
        for name, procs in config.get("defaults", {}).items():
            if isinstance(procs, str):
                procs = [procs]
            for proc in procs:
                if proc not in self.processors:
                    raise ConfigError("Unknown processor: {}".format(proc))
            self.defaults[name] = procs
        self.concat = config.get("concat", {})
        self.rewrite = REWRITE_DEFAULTS.copy()
        for key, value in (config.get("rewrite") or {}).items():
            if key not in REWRITE_DEFAULTS:
                raise ConfigError("Unknown rewrite option: {}".format(key))
            self.rewrite[key] = value
        self.assets = config.get("assets", {})

    @property
    def storage_path(self):
        return self.resolve(self.location)

    def output_path(self, asset):
        return self.resolve(os.path.join(self.location, asset))

    def rewrite_options(self):
        """
        Returns the url() rewriting Options for this configuration. A relative root_dir
        is taken relative to base_dir, like every other configured path.
        """
        root = self.rewrite["root"] or "~"
        root_dir = self.rewrite["root_dir"]
        if root_dir:
            root_dir = os.path.abspath(self.resolve(root_dir))
        return Options(
            root=root,
            absolute=bool(self.rewrite["absolute"]),
            keep_query=bool(self.rewrite["keep_query"]),
            join=make_join(root_dir=root_dir, root=root),
        )

    def transformer(self, file_path):
        """
        Returns a transform_value(value, directory) function that rewrites url()
        statements into requests relative to file_path.
        """
        return value_processor(file_path, self.rewrite_options())

    def find_input(self, name):
        """
        Returns the full path of the specified input name, if it exists. By default,
        all directories in self.search are searched.
        """
        for root in self.search:
            path = os.path.join(self.resolve(root), name)
            if os.path.exists(path):
                return path
        return None

    def iter_assets(self):
        """
        Yields (asset_name, inputs) pairs, where inputs is a list of Input objects.
        """
        for name, specs in self.assets.items():
            if isinstance(specs, str):
                specs = [specs]
            inputs = []
            for spec in specs:
                if isinstance(spec, str):
                    depends = []
                elif isinstance(spec, dict):
                    spec, depends = list(spec.items())[0]
                    if isinstance(depends, str):
                        depends = [depends]
                else:
                    raise ConfigError("Unknown input type: {}".format(spec))
                *processors, input_name = spec.split(":")
                if processors:
                    # cssmin:sass:somefile.scss --> cssmin(sass(somefile.scss))
                    processors = list(reversed(processors))
                else:
                    ext = os.path.splitext(input_name)[1].replace(".", "").lower()
                    processors = self.defaults.get(ext, [])
                for proc in processors:
                    if proc not in self.processors:
                        raise ConfigError("Unknown processor: {}".format(proc))
                # Resolve processors into dotted method paths.
                processors = [self.processors[proc] for proc in processors]
                path = self.find_input(input_name)
                if path:
                    inputs.append(
                        Input(input_name, path, processors, depends, asset=name)
                    )
                else:
                    logger.error("Input not found: {}".format(input_name))
            yield name, inputs

    def modified(self, inputs, mtime=0):
        """
        Returns (quickly) if any of the inputs were modified since mtime.
        """
        for i in inputs:
            if i.modified(mtime):
                return True
        return False

    def pack(self, asset=None, force=False):
        """
        Packs one or all assets. By default, assets will only be packed if they have not
        been previously packed, or if any of the inputs to an asset have changed since
        the last time it was packed. To force packing, set force=True. To pack only a
        single asset, specify its name. Returns the list of asset names packed.
        """
        packed = []
        for name, inputs in self.iter_assets():
            if asset and asset != name:
                continue
            path = self.output_path(name)
            mtime = os.path.getmtime(path) if os.path.exists(path) else 0
            if force or mtime == 0 or self.modified(inputs, mtime):
                ext = os.path.splitext(name)[1].replace(".", "").lower()
                sep = self.concat.get(ext, "\n")
                os.makedirs(os.path.dirname(path), exist_ok=True)
                logger.debug(
                    "Packing {} <<< {}".format(name, " | ".join(str(i) for i in inputs))
                )
                with open(path, "w", encoding="utf-8") as output:
                    for idx, i in enumerate(inputs):
                        if idx > 0:
                            output.write(sep)
                        output.write(i.process(self))
                packed.append(name)
        return packed
