"""Ledger node connection and the HealthcareRecords contract interface."""
from __future__ import annotations

from typing import Any, Dict, List

from web3 import Web3
from web3.contract import Contract

CONTRACT_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "uint256", "name": "patientID", "type": "uint256"},
            {"internalType": "string", "name": "patientName", "type": "string"},
            {"internalType": "string", "name": "diagnosis", "type": "string"},
            {"internalType": "string", "name": "treatment", "type": "string"},
        ],
        "name": "addRecord",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "provider", "type": "address"}],
        "name": "authorizeProvider",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "address", "name": "provider", "type": "address"}],
        "name": "isAuthorized",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {"inputs": [], "stateMutability": "nonpayable", "type": "constructor"},
    {
        "inputs": [],
        "name": "getOwner",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "patientID", "type": "uint256"}],
        "name": "getPatientRecords",
        "outputs": [
            {
                "components": [
                    {"internalType": "uint256", "name": "recordID", "type": "uint256"},
                    {"internalType": "string", "name": "patientName", "type": "string"},
                    {"internalType": "string", "name": "diagnosis", "type": "string"},
                    {"internalType": "string", "name": "treatment", "type": "string"},
                    {"internalType": "uint256", "name": "timestamp", "type": "uint256"},
                ],
                "internalType": "struct HealthcareRecords.Record[]",
                "name": "",
                "type": "tuple[]",
            }
        ],
        "stateMutability": "view",
        "type": "function",
    },
]


def connect_web3(rpc_url: str, timeout: float = 10.0) -> Web3:
    """Build a web3 client for the node; does not probe the connection."""
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))


def load_contract(w3: Web3, address: str) -> Contract:
    return w3.eth.contract(address=Web3.to_checksum_address(address), abi=CONTRACT_ABI)
