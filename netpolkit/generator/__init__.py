"""Tags, actions, policy builders and feature extraction for network policy test cases."""