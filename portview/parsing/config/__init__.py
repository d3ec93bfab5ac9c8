from .layout import StatementLayout

__all__ = ['StatementLayout']
