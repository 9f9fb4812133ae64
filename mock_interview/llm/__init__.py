# LLM client, prompts and flows
