# Copyright 2024 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
This module defines the exception roots for contract execution.

Both roots inherit from `BaseException`, NOT from `Exception`, so they pass through `except Exception` blocks
written in blueprints. A blueprint cannot accidentally swallow the failure of a call it made.

1. NCInternalException: known runtime errors, such as calling a method that does not exist.
2. NCUserException: known blueprint errors, raised when a business rule is violated.

Any other exception raised by blueprint code is wrapped in an NCUserException by the runner, keeping the original
exception as `__cause__`.
"""


class __NCTransactionFail__(BaseException):
    """A super type for all exceptions that fail a contract call."""


class NCInternalException(__NCTransactionFail__):
    """
    This exception represents known internal errors that can happen during contract execution,
    such as calling a public method from a view method.

    It may be raised directly or subclassed by the runtime. When raised, it will fail the call.
    It must not be raised or subclassed by blueprints.
    """


class NCUserException(__NCTransactionFail__):
    """
    This exception represents known user errors that can happen during contract execution,
    such as when the business rule of a blueprint is violated.

    It may be raised directly or subclassed by blueprints. When raised, it will fail the call.
    """
