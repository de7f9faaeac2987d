
import sys
import os

# Add project root to path
sys.path.append(os.getcwd())

try:
    from poolview.core.entities.event import LiquidityEvent
    from poolview.core.use_cases.provider_aggregator import aggregate_top_providers
    from poolview.infrastructure.gateways.subgraph_api import SubgraphGateway
    from poolview.api.main import app
    print("✅ All imports successful.")
except Exception as e:
    print(f"❌ Import failed: {e}")
    sys.exit(1)

# Test Aggregator Logic Simple
def test_aggregate():
    try:
        deposits = [
            LiquidityEvent(providerAddress="0xA", amountUSD="100", occurredAt=1),
            LiquidityEvent(providerAddress="0xB", amountUSD="50", occurredAt=2),
        ]
        withdrawals = [LiquidityEvent(providerAddress="0xA", amountUSD="30", occurredAt=3)]

        providers = aggregate_top_providers(deposits, withdrawals, limit=20)

        if [p.address for p in providers] == ["0xA", "0xB"] and providers[0].netPosition == 70:
            print("✅ Aggregation logic basic test passed.")
        else:
            print(f"❌ Aggregation logic failed, got {[(p.address, p.netPosition) for p in providers]}")
    except Exception as e:
        print(f"❌ Aggregation raised exception: {e}")

if __name__ == "__main__":
    test_aggregate()
