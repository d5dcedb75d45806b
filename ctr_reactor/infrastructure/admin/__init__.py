# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .gate import AdminGate, install_admin_filter

__all__ = ["AdminGate", "install_admin_filter"]
