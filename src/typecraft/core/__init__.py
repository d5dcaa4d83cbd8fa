"""
typecraft core: combinators, grammar, IR, linker, configuration and errors.
"""
