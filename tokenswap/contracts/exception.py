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

from typing import TypeAlias

from tokenswap.contracts.error_handling import NCInternalException, NCUserException

"""
This module contains exceptions related to contract execution.

Runtime errors inherit from NCInternalException. Blueprints must only raise NCFail and its subclasses.
"""


class BlueprintSyntaxError(NCInternalException):
    """Raised when a blueprint contains invalid syntax."""
    pass


class BlueprintDoesNotExist(NCInternalException):
    pass


class NCViewMethodError(NCInternalException):
    """Raised when a view method changes the state of the contract."""
    pass


class NCMethodNotFound(NCInternalException):
    """Raised when a method is not found in a contract."""
    pass


class NCInvalidContext(NCInternalException):
    """Raised when trying to run a method with an invalid context."""
    pass


class NCRecursionError(NCInternalException):
    """Raised when recursion gets too deep."""


class NCNumberOfCallsExceeded(NCInternalException):
    """Raised when the total number of calls have been exceeded."""


class NCInvalidContractId(NCInternalException):
    """Raised when a contract call is invalid."""


class NCInvalidArgument(NCInternalException):
    """Raised when a method is called with arguments that do not match its signature."""


class NCInvalidMethodCall(NCInternalException):
    """Raised when a contract calls another contract's invalid method."""


class NCInvalidPublicMethodCallFromView(NCInternalException):
    """Raised when a view method tries to call a public method."""


class NCAlreadyInitializedContractError(NCInternalException):
    """Raised when one tries to initialize a contract that has already been initialized."""


class NCUninitializedContractError(NCInternalException):
    """Raised when a contract calls a method from an uninitialized contract."""


class NCReentrancyError(NCInternalException):
    """Raised when a public method is called on a contract that is already executing a call.

    Methods that support being re-entered must opt in with `@public(allow_reentrancy=True)`."""


"""
Just a type alias for compatibility. Represents an exception that may only be raised from user code in blueprints.
"""
NCFail: TypeAlias = NCUserException
