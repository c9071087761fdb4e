# Well-known CoinGecko ids that are always listed ahead of the long tail
# when the listing contains them.
PRIORITY_COIN_IDS = frozenset(
    {
        # top of the market
        "bitcoin", "ethereum", "tether", "bnb", "solana", "xrp", "usd-coin",
        "staked-ether", "cardano", "dogecoin", "avalanche-2", "tron", "chainlink",
        "polygon-ecosystem-token", "wrapped-bitcoin", "bitcoin-cash", "near",
        "uniswap", "internet-computer", "litecoin", "leo-token", "dai", "pepe",
        "kaspa", "ethereum-classic",
        # large caps
        "monero", "stellar", "okb", "cosmos", "arbitrum", "vechain", "filecoin",
        "maker", "hedera-hashgraph", "optimism", "injective-protocol", "lido-dao",
        "immutable-x", "fantom", "mantle", "aptos", "cronos", "atom", "algorand",
        "thorchain", "sei-network", "the-sandbox", "render-token", "bitcoin-sv",
        "blockstack",
        # established mid caps
        "flow", "aave", "quant-network", "decentraland", "elrond-erd-2",
        "axie-infinity", "theta-token", "tezos", "bitget-token", "kucoin-shares",
        "neo", "iota", "chiliz", "eos", "pancakeswap-token",
        "compound-governance-token", "celsius-degree-token", "helium", "the-graph",
        "curve-dao-token", "synthetix-network-token", "zcash", "mina-protocol",
        "dash", "yearn-finance", "basic-attention-token", "1inch", "sushi", "gala",
        "enjincoin", "loopring", "amp-token", "waves", "zilliqa", "havven",
        "ftx-token", "omisego", "qtum", "decred", "ravencoin", "nano", "icon",
        "ontology", "verge", "digibyte", "bitcoin-gold", "wax", "chain-2",
        "harmony", "celo", "bancor", "republic-protocol", "storj",
        # defi and ecosystem tokens
        "balancer", "convex-finance", "rocket-pool", "frax", "gmx", "looksrare",
        "olympus", "tokenlon", "marinade", "radix", "kava", "secret", "osmosis",
        "terra-luna-2", "anchor-protocol", "mirror-protocol", "biswap", "mdex",
        "quickswap", "honeyswap", "spookyswap", "traderjoe", "platypus-finance",
        "pudgy-penguins",
    }
)
