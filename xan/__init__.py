"""
XAN Governed Token Package

Core imports are lazily loaded so that importing a submodule does not pull
in the whole token. For direct module access, import from submodules:

    from xan.tokens import XanToken
    from xan.governance import VoteTracker, QuorumGate
    from xan.clock import ManualClock
"""

# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'XanToken':
        from .tokens import XanToken
        return XanToken
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name == 'XanException':
        from .exceptions import XanException
        return XanException
    raise AttributeError(f"module 'xan' has no attribute {name!r}")

__all__ = ['XanToken', 'load_config', 'XanException']
