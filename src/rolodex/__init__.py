"""
Rolodex — a small persistent person-record store with live change feeds.

Rolodex keeps a list of people (first name, last name, numeric id) in a
local SQLite file, exposes create/update/delete coroutines, and pushes the
full, id-ordered record set to every subscriber whenever it changes. A UI
renders whatever the latest snapshot holds and hands edits back to the
store.

Package layout (src/rolodex/):
  core/         — constants, config, logging, exceptions
  core/store/   — Person model, snapshot broadcast, PersonStore
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
