from prometheus_client import Counter

MARKETPLACE_FETCHES_COUNTER = Counter(
    "nft_marketplace_client_fetches",
    "Number of marketplace record fetches",
    ["mode", "outcome"],
)

EXCLUDED_RECORDS_COUNTER = Counter(
    "nft_marketplace_client_excluded_records",
    "Number of NFT records excluded from an owner-scoped fetch",
    ["reason"],
)

WORKFLOW_OUTCOMES_COUNTER = Counter(
    "nft_marketplace_client_workflow_outcomes",
    "Number of settled confirmation workflows",
    ["action", "outcome"],
)
