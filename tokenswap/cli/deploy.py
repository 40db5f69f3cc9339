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

import os
from argparse import ArgumentParser, Namespace
from typing import NamedTuple

from structlog import get_logger

from tokenswap.conf.settings import TokenSwapSettings
from tokenswap.contracts.context import Context
from tokenswap.contracts.runner import Runner
from tokenswap.contracts.types import Address, CallerId, ContractId
from tokenswap.reactor import ReactorProtocol

logger = get_logger()


class Deployment(NamedTuple):
    """Ids of the contracts created by `deploy_contracts()`."""
    deployer: CallerId
    ht_token: ContractId
    lt_token: ContractId
    pool: ContractId


def create_parser() -> ArgumentParser:
    from tokenswap.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('--address', help='Deployer address in base58 (default: a new random address)')
    parser.add_argument('--initial-supply', type=int, help='Initial supply of each token, in base units')
    parser.add_argument('--liquidity-ht', type=int, default=0, help='HT liquidity to add after deploying')
    parser.add_argument('--liquidity-lt', type=int, default=0, help='LT liquidity to add after deploying')
    parser.add_argument('--data', help='Directory to save the contract execution logs')
    return parser


def build_runner(settings: TokenSwapSettings, *, reactor: ReactorProtocol, log_dir: str | None = None) -> Runner:
    """Create a runner with an empty state and the blueprints of the settings."""
    from tokenswap.contracts.catalog import generate_catalog_from_settings
    from tokenswap.contracts.nc_exec_logs import NCLogConfig, NCLogStorage
    from tokenswap.contracts.runner import RunnerFactory

    log_storage = None
    if log_dir is not None:
        log_storage = NCLogStorage(path=log_dir, config=NCLogConfig(settings.NC_LOG_CONFIG))

    factory = RunnerFactory(
        reactor=reactor,
        settings=settings,
        catalog=generate_catalog_from_settings(settings),
        log_storage=log_storage,
    )
    return factory.create()


def get_deployer_address(address58: str | None) -> Address:
    """Decode the given base58 address, or create a random one."""
    from tokenswap.crypto.util import ADDRESS_HASH_SIZE, decode_address, get_address_from_public_key_hash

    if address58 is not None:
        return Address(decode_address(address58))
    return Address(get_address_from_public_key_hash(os.urandom(ADDRESS_HASH_SIZE)))


def deploy_contracts(
    runner: Runner,
    settings: TokenSwapSettings,
    deployer: CallerId,
    *,
    initial_supply: int,
    timestamp: int,
) -> Deployment:
    """Deploy HT, LT and the pool. The deployer receives the whole supply of both tokens."""
    from tokenswap.contracts.blueprints import FungibleToken, TokenSwap
    from tokenswap.contracts.utils import derive_contract_id

    token_blueprint_id = runner.catalog.get_blueprint_id(FungibleToken)
    pool_blueprint_id = runner.catalog.get_blueprint_id(TokenSwap)

    ht_token = derive_contract_id(deployer, settings.HT_TOKEN_SYMBOL.encode('utf-8'), token_blueprint_id)
    lt_token = derive_contract_id(deployer, settings.LT_TOKEN_SYMBOL.encode('utf-8'), token_blueprint_id)
    pool = derive_contract_id(deployer, b'pool', pool_blueprint_id)

    ctx = Context(caller_id=deployer, timestamp=timestamp)
    runner.create_contract(
        ht_token, token_blueprint_id, ctx, settings.HT_TOKEN_NAME, settings.HT_TOKEN_SYMBOL, initial_supply,
    )
    runner.create_contract(
        lt_token, token_blueprint_id, ctx, settings.LT_TOKEN_NAME, settings.LT_TOKEN_SYMBOL, initial_supply,
    )
    runner.create_contract(pool, pool_blueprint_id, ctx, ht_token, lt_token)
    logger.info('contracts deployed', ht_token=ht_token.hex(), lt_token=lt_token.hex(), pool=pool.hex())
    return Deployment(deployer=deployer, ht_token=ht_token, lt_token=lt_token, pool=pool)


def add_liquidity(runner: Runner, deployment: Deployment, *, amount_ht: int, amount_lt: int, timestamp: int) -> None:
    """Approve the pool on both tokens and add liquidity as the deployer."""
    ctx = Context(caller_id=deployment.deployer, timestamp=timestamp)
    runner.call_public_method(deployment.ht_token, 'approve', ctx, deployment.pool, amount_ht)
    runner.call_public_method(deployment.lt_token, 'approve', ctx, deployment.pool, amount_lt)
    runner.call_public_method(deployment.pool, 'add_liquidity', ctx, amount_ht, amount_lt)


def execute(args: Namespace) -> None:
    from tokenswap.conf.get_settings import get_global_settings
    from tokenswap.crypto.util import get_address_b58_from_bytes
    from tokenswap.reactor import get_global_reactor

    settings = get_global_settings()
    reactor = get_global_reactor()
    runner = build_runner(settings, reactor=reactor, log_dir=args.data)
    deployer = get_deployer_address(args.address)
    timestamp = int(reactor.seconds())

    initial_supply = args.initial_supply
    if initial_supply is None:
        initial_supply = settings.DEFAULT_INITIAL_SUPPLY

    deployment = deploy_contracts(runner, settings, deployer, initial_supply=initial_supply, timestamp=timestamp)

    print(f'Deployer: {get_address_b58_from_bytes(deployer)}')
    print(f'{settings.HT_TOKEN_NAME} deployed to: {deployment.ht_token.hex()}')
    print(f'{settings.LT_TOKEN_NAME} deployed to: {deployment.lt_token.hex()}')
    print(f'TokenSwap deployed to: {deployment.pool.hex()}')

    if args.liquidity_ht or args.liquidity_lt:
        add_liquidity(runner, deployment, amount_ht=args.liquidity_ht, amount_lt=args.liquidity_lt, timestamp=timestamp)
        ht_liquidity = runner.call_view_method(deployment.pool, 'get_ht_liquidity')
        lt_liquidity = runner.call_view_method(deployment.pool, 'get_lt_liquidity')
        print(f'Liquidity: {ht_liquidity} {settings.HT_TOKEN_SYMBOL} / {lt_liquidity} {settings.LT_TOKEN_SYMBOL}')


def main():
    parser = create_parser()
    args = parser.parse_args()
    execute(args)
