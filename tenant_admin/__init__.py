# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Multi-tenant business data administration backend.
"""

__version__ = "1.0.0"
