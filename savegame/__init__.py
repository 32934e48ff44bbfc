"""
Save Game module.

Provides game-state persistence built on top of savecore:
- Snapshot (the persisted data model, Pydantic models)
- Save (serializer, slot store, validator, save manager)
"""
