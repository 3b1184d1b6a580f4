# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Use cases package - one class per business operation.

Every use case receives its collaborators through the constructor and
exposes ``execute(request)``.
"""
