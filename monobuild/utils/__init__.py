from .fs import read_text, write_text, remove_tree

__all__ = ['read_text', 'write_text', 'remove_tree']
