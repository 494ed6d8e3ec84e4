"""Upstream provider clients (Coinbase, Infura, CoinGecko, Supabase)."""
