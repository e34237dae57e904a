from atria import algos, config, errors, metrics, structures, tools

__all__ = ["algos", "config", "errors", "metrics", "structures", "tools"]
