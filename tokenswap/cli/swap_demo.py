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

from argparse import ArgumentParser, Namespace

from tokenswap.cli.deploy import add_liquidity, build_runner, deploy_contracts, get_deployer_address


def create_parser() -> ArgumentParser:
    from tokenswap.cli.util import create_parser
    parser = create_parser()
    parser.add_argument('--liquidity-ht', type=int, default=7 * 10**18, help='HT liquidity (default=7e18)')
    parser.add_argument('--liquidity-lt', type=int, default=70 * 10**18, help='LT liquidity (default=70e18)')
    parser.add_argument('--swap-ht', type=int, default=4 * 10**18, help='HT amount to swap for LT (default=4e18)')
    parser.add_argument('--swap-lt', type=int, default=40 * 10**18, help='LT amount to swap for HT (default=40e18)')
    parser.add_argument('--show-logs', action='store_true', help='Print the execution logs of the last swap')
    return parser


def execute(args: Namespace) -> None:
    from tokenswap.conf.get_settings import get_global_settings
    from tokenswap.contracts.blueprints.events import parse_event
    from tokenswap.contracts.context import Context
    from tokenswap.reactor import get_global_reactor

    settings = get_global_settings()
    reactor = get_global_reactor()
    runner = build_runner(settings, reactor=reactor)
    user = get_deployer_address(None)
    timestamp = int(reactor.seconds())

    deployment = deploy_contracts(
        runner, settings, user, initial_supply=settings.DEFAULT_INITIAL_SUPPLY, timestamp=timestamp,
    )
    add_liquidity(runner, deployment, amount_ht=args.liquidity_ht, amount_lt=args.liquidity_lt, timestamp=timestamp)

    def print_state(title: str) -> None:
        ht_liquidity = runner.call_view_method(deployment.pool, 'get_ht_liquidity')
        lt_liquidity = runner.call_view_method(deployment.pool, 'get_lt_liquidity')
        ht_balance = runner.call_view_method(deployment.ht_token, 'balance_of', user)
        lt_balance = runner.call_view_method(deployment.lt_token, 'balance_of', user)
        print(f'[{title}]')
        ht_symbol, lt_symbol = settings.HT_TOKEN_SYMBOL, settings.LT_TOKEN_SYMBOL
        print(f'    pool liquidity: {ht_liquidity} {ht_symbol} / {lt_liquidity} {lt_symbol}')
        print(f'    exchange rate: {runner.call_view_method(deployment.pool, "get_exchange_rate")}')
        print(f'    user balance: {ht_balance} {ht_symbol} / {lt_balance} {lt_symbol}')

    print_state('after add_liquidity')

    ctx = Context(caller_id=user, timestamp=timestamp)
    runner.call_public_method(deployment.ht_token, 'approve', ctx, deployment.pool, args.swap_ht)
    received = runner.call_public_method(deployment.pool, 'swap_high_to_low', ctx, args.swap_ht)
    print(f'swapped {args.swap_ht} {settings.HT_TOKEN_SYMBOL} for {received} {settings.LT_TOKEN_SYMBOL}')
    print_state('after swap_high_to_low')

    runner.call_public_method(deployment.lt_token, 'approve', ctx, deployment.pool, args.swap_lt)
    received = runner.call_public_method(deployment.pool, 'swap_low_to_high', ctx, args.swap_lt)
    print(f'swapped {args.swap_lt} {settings.LT_TOKEN_SYMBOL} for {received} {settings.HT_TOKEN_SYMBOL}')
    if args.show_logs:
        print(runner.get_last_call_info().get_formatted_logs())
    print_state('after swap_low_to_high')

    print('[events]')
    for event in runner.get_events():
        print(f'    {event.nc_id.hex()[:8]} {parse_event(event.data).model_dump()}')


def main():
    parser = create_parser()
    args = parser.parse_args()
    execute(args)
