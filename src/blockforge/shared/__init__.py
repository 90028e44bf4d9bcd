"""
Shared module containing cross-cutting concerns.

Structure:
    shared/
        registry.py      - ModuleRegistry for keyed component registration
        result_types.py  - CommandResult returned to the CLI
        validation.py    - Validation framework for field values
"""
