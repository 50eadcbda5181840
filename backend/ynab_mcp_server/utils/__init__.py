"""
Utilities Package

Helper modules for MCP server:
- currency.py: Milliunit conversion, date and text normalization
- defaults.py: Default values (page size, cleared status)
- validators.py: Input validation functions
- formatters.py: Response formatting utilities
"""
