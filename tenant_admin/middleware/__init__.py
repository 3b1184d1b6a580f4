# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

Contains the caller identity extraction and the centralized error handling
for the tenant administration API.
"""
