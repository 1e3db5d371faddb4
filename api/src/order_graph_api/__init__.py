"""Order Graph API: order JSON documents as typed node/edge graphs."""
