"""Multi-venue liquidity routing and arbitrage detection."""
