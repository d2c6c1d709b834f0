"""Keep-alive monitor for IBC channels between two Cosmos chains."""
