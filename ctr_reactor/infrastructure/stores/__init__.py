# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .factory import build_auth_store
from .sqlalchemy_store import SqlAlchemyAuthStore
from .supabase_store import SupabaseAuthStore

__all__ = ["SqlAlchemyAuthStore", "SupabaseAuthStore", "build_auth_store"]
