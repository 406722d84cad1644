"""
Console Kernel - change-control core for the catalog administration console.

A maker-checker governed record layer with:
- Field-level change sets for every edit
- Append-only audit trail of mutations, logins and approval decisions
- Segregation of duties (a maker never checks their own change)
- Domain and tenant scoping of every principal
"""

__version__ = "0.1.0"
