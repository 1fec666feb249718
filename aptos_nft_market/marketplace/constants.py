DEFAULT_PAGE_SIZE = 8

# Bounds used for the owner index view call
DEFAULT_OWNER_NFTS_LIMIT = 100
DEFAULT_OWNER_NFTS_OFFSET = 0

# View functions
GET_ALL_NFTS_FOR_OWNER = "get_all_nfts_for_owner"
GET_NFT_DETAILS = "get_nft_details"

# Entry functions
PURCHASE_NFT = "purchase_nft"
LIST_FOR_SALE = "list_for_sale"
TIP_OWNER = "tip_owner"
TRANSFER_OWNERSHIP = "transfer_ownership"

DEFAULT_TIP_AMOUNT = "0"
TIP_PRESETS = (0.1, 0.5, 1, 5)
