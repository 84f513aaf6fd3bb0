"""Domain-level policies and business rules.

This package contains logic that defines *what* the rules are, independent
from *where* they are applied (services, repositories, etc.): validity
interval semantics, version row shape, policy presets and entity validators.
"""
