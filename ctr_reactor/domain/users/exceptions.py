# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from ctr_reactor.shared.errors.base import DomainError


class InvalidInputError(DomainError):
    default_code = "invalid_input"
    default_message = "invalid input"


class DuplicateEmailError(DomainError):
    default_code = "duplicate_email"
    default_status = HTTPStatus.CONFLICT
    default_message = "unable to create an account with these details"


class InvalidCredentialsError(DomainError):
    default_code = "invalid_credentials"
    default_status = HTTPStatus.UNAUTHORIZED
    default_message = "invalid credentials"


class UnauthenticatedError(DomainError):
    default_code = "unauthenticated"
    default_status = HTTPStatus.UNAUTHORIZED
    default_message = "not authenticated"


class StoreError(Exception):
    """Raised by store implementations; never rendered to clients directly."""
