"""
SimpleDEX Package

Two-asset constant-product AMM with a 0.5% fee to a fee collector.

Core imports are lazily loaded. For direct module access, import from submodules:

    from simpledex.exchange import SimpleDEX
    from simpledex.tokens import Token
    from simpledex.exceptions import ReentrantCall
"""

__version__ = "1.0.0"


def __getattr__(name):
    """Lazy module loading so importing the package stays cheap."""
    if name == 'SimpleDEX':
        from .exchange import SimpleDEX
        return SimpleDEX
    elif name == 'Token':
        from .tokens import Token
        return Token
    elif name == 'deploy_reference_pool':
        from .deploy import deploy_reference_pool
        return deploy_reference_pool
    raise AttributeError(f"module 'simpledex' has no attribute {name!r}")

__all__ = ['SimpleDEX', 'Token', 'deploy_reference_pool']
