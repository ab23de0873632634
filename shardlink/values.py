"""
Created by Epic at 10/18/26
"""
version = "0.1.0"
api_version = 10
gateway_url = f"wss://gateway.discord.gg/?v={api_version}&encoding=json"
