# SPDX-License-Identifier: Apache-2.0

"""
Infrastructure services: MongoDB connection handling, password identity
and HAL response formatting.
"""
