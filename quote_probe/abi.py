"""
Minimal ABIs for the read-only quote calls.
"""

# Constant-product router (Uniswap/Pancake V2)
V2_ROUTER_ABI = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"internalType": "address[]", "name": "path", "type": "address[]"},
        ],
        "name": "getAmountsOut",
        "outputs": [
            {"internalType": "uint256[]", "name": "amounts", "type": "uint256[]"}
        ],
        "stateMutability": "view",
        "type": "function",
    }
]

# Concentrated-liquidity quoter, flat single-pool form (Quoter V1 signature)
V3_QUOTER_SINGLE_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "tokenIn", "type": "address"},
            {"internalType": "address", "name": "tokenOut", "type": "address"},
            {"internalType": "uint24", "name": "fee", "type": "uint24"},
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {
                "internalType": "uint160",
                "name": "sqrtPriceLimitX96",
                "type": "uint160",
            },
        ],
        "name": "quoteExactInputSingle",
        "outputs": [
            {"internalType": "uint256", "name": "amountOut", "type": "uint256"}
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    }
]

# Concentrated-liquidity quoter, encoded-path form (QuoterV2)
V3_QUOTER_PATH_ABI = [
    {
        "inputs": [
            {"internalType": "bytes", "name": "path", "type": "bytes"},
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
        ],
        "name": "quoteExactInput",
        "outputs": [
            {"internalType": "uint256", "name": "amountOut", "type": "uint256"},
            {
                "internalType": "uint160[]",
                "name": "sqrtPriceX96AfterList",
                "type": "uint160[]",
            },
            {
                "internalType": "uint32[]",
                "name": "initializedTicksCrossedList",
                "type": "uint32[]",
            },
            {"internalType": "uint256", "name": "gasEstimate", "type": "uint256"},
        ],
        "stateMutability": "nonpayable",
        "type": "function",
    }
]

# Stable-swap pool (Wombat)
STABLE_POOL_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "fromToken", "type": "address"},
            {"internalType": "address", "name": "toToken", "type": "address"},
            {"internalType": "int256", "name": "fromAmount", "type": "int256"},
        ],
        "name": "quotePotentialSwap",
        "outputs": [
            {"internalType": "uint256", "name": "potentialOutcome", "type": "uint256"},
            {"internalType": "uint256", "name": "haircut", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    }
]
