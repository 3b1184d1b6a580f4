# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the tenant administration backend.

This package holds the error taxonomy, repository contracts, tenant access
policy and password rules. Nothing here performs I/O.
"""
