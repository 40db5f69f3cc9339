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

import hashlib

import base58

from tokenswap.conf.get_settings import get_global_settings

ADDRESS_HASH_SIZE: int = 20
ADDRESS_CHECKSUM_SIZE: int = 4
ADDRESS_SIZE: int = 1 + ADDRESS_HASH_SIZE + ADDRESS_CHECKSUM_SIZE


class InvalidAddress(ValueError):
    pass


def get_checksum(address_bytes: bytes) -> bytes:
    """ Calculate double sha256 of address and gets first 4 bytes

        :param address_bytes: address before checksum
        :param address_bytes: bytes

        :return: checksum of the address
        :rtype: bytes
    """
    return hashlib.sha256(hashlib.sha256(address_bytes).digest()).digest()[:ADDRESS_CHECKSUM_SIZE]


def get_address_from_public_key_hash(public_key_hash: bytes, version_byte: bytes | None = None) -> bytes:
    """Gets the address in bytes from the public key hash

        :param public_key_hash: hash of public key (sha256 and ripemd160)
        :param version_byte: first byte of address to define the version of this address

        :return: address in bytes
        :rtype: bytes
    """
    if len(public_key_hash) != ADDRESS_HASH_SIZE:
        raise InvalidAddress(f'public key hash must have {ADDRESS_HASH_SIZE} bytes, got {len(public_key_hash)}')
    if version_byte is None:
        version_byte = get_global_settings().P2PKH_VERSION_BYTE
    address = version_byte + public_key_hash
    return address + get_checksum(address)


def get_address_b58_from_bytes(address: bytes) -> str:
    """Gets the b58 address from the address in bytes"""
    return base58.b58encode(address).decode('utf-8')


def decode_address(address58: str) -> bytes:
    """ Decode address in base58 to bytes and validate its checksum

    :param address58: Wallet address in base58
    :type address58: string

    :raises InvalidAddress: if address58 is not a valid base58 string or
                            has an invalid size or checksum

    :return: Address in bytes
    :rtype: bytes
    """
    try:
        decoded_address = base58.b58decode(address58)
    except ValueError:
        raise InvalidAddress(f'invalid base58 address: {address58}')

    if len(decoded_address) != ADDRESS_SIZE:
        raise InvalidAddress(f'address must have {ADDRESS_SIZE} bytes, got {len(decoded_address)}')

    body, checksum = decoded_address[:-ADDRESS_CHECKSUM_SIZE], decoded_address[-ADDRESS_CHECKSUM_SIZE:]
    if get_checksum(body) != checksum:
        raise InvalidAddress(f'invalid checksum for address: {address58}')

    return decoded_address
