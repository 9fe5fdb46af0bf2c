"""Chain constants: endpoints, contract addresses, selectors and topics."""

MONAD_CHAIN_ID = "monad"
NATIVE_DECIMALS = 18
DEFAULT_TOKEN_DECIMALS = 18

# Public Monad mainnet RPC endpoints, used round-robin
DEFAULT_RPC_ENDPOINTS = (
    "https://rpc.monad.xyz",
    "https://rpc1.monad.xyz",
    "https://rpc3.monad.xyz",
    "https://rpc-mainnet.monadinfra.com",
)

DEXSCREENER_API_URL = "https://api.dexscreener.com"

# nad.fun mainnet contracts
BONDING_CURVE_ADDRESS = "0xA7283d07812a02AFB7C09B60f8896bCEA3F90aCE"
BONDING_CURVE_ROUTER_ADDRESS = "0x6F6B8F1a20703309951a5127c45B49b1CD981A22"
LENS_ADDRESS = "0x7e78A8DE94f21804F7a17F4E8BF9EC2c872187ea"
DEX_ROUTER_ADDRESS = "0x0B79d71AE99528D1dB24A4148b5f4F865cc2b137"
DEX_FACTORY_ADDRESS = "0x6B5F564339DbAD6b780249827f2198a841FEB7F3"
WMON_ADDRESS = "0x3bd359C1119dA7Da1D913D1C4D2B7c461115433A"

# Event topics
# Transfer(address indexed from, address indexed to, uint256 value)
TRANSFER_EVENT_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
# CurveCreate(address indexed creator, address indexed token, address indexed pool,
#             string name, string symbol, string tokenURI,
#             uint256 virtualMon, uint256 virtualToken, uint256 targetTokenAmount)
CURVE_CREATE_TOPIC = "0xd37e3f4f651fe74251701614dbeac478f5a0d29068e87bbe44e5026d166abca9"

# ERC20 selectors
ERC20_BALANCE_OF_SELECTOR = "0x70a08231"
ERC20_DECIMALS_SELECTOR = "0x313ce567"
ERC20_SYMBOL_SELECTOR = "0x95d89b41"
ERC20_NAME_SELECTOR = "0x06fdde03"

# Lens selectors
LENS_IS_GRADUATED_SELECTOR = "0x68a4c8b7"  # isGraduated(address)
LENS_GET_PROGRESS_SELECTOR = "0xaef76501"  # getProgress(address), 0-10000
# curves(address) -> (virtualMon, virtualToken, k, ...)
BONDING_CURVE_CURVES_SELECTOR = "0xf3de0c41"

# Transaction input selectors used for classification
APPROVE_SELECTOR = "0x095ea7b3"
TRANSFER_SELECTOR = "0xa9059cbb"
SWAP_SELECTORS = frozenset({
    "0x38ed1739",  # swapExactTokensForTokens
    "0x7ff36ab5",  # swapExactETHForTokens
})

# DEXScreener search queries that surface Monad pairs
DEX_SEARCH_QUERIES = ("monad", "nad.fun", "MON", "WMON")
DEX_PAIR_QUERIES = ("MON", "WMON", "USDC", "USDT", "ETH", "meme")
NADFUN_DEX_ID = "nad-fun"
MAX_BOOSTED_TOKENS = 50
