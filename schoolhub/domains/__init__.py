# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services for SchoolHub.

Each subpackage owns one entity: ``user``, ``class_``, ``student`` and
``enrollment``. ``auth`` covers passwords, tokens and login. Shared error
categories live in ``errors``.
"""
