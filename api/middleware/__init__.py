# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains middleware components for authentication, role checks,
request validation and error formatting in the staffing forms API.
"""
