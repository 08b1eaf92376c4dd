"""HTTP routers exposing the game sessions."""
